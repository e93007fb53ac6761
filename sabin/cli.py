"""
CLI for sabin: init, link, and task create/update/list/show/delete/check/organize.
"""
import functools
import logging
import os
import re
import shutil
import sys
from pathlib import Path

import click
from tabulate import tabulate

from . import __version__
from .config import defaults, write_config
from .errors import RootExistsError, SabinError
from .layout import config_path, init_dirs
from .resolver import ROOT_NAME, resolve_root, root_type, write_link
from .tasklib import Task, TaskStore, validate_status

STATUS_COLORS = {
    'open': 'yellow',
    'ready': 'blue',
    'in_progress': 'cyan',
    'review': 'magenta',
    'completed': 'green',
}


def reports_errors(f):
    """Print sabin and I/O errors as one line on stderr and exit 1."""
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except SabinError as e:
            click.echo(f"{click.style(f'[{e.code}]', fg='red')} {e}", err=True)
            sys.exit(1)
        except OSError as e:
            click.echo(f"{click.style('Unexpected error:', fg='red')} {e}", err=True)
            sys.exit(1)
    return wrapper


def _store(project_dir: Path) -> TaskStore:
    return TaskStore.from_resolved(resolve_root(project_dir))


def _styled_status(status: str) -> str:
    color = STATUS_COLORS.get(status)
    return click.style(status, fg=color) if color else status


def _sort_key(task: Task, prefix: str):
    m = re.match(rf"^{re.escape(prefix)}-(\d+)$", task.id)
    return (int(m.group(1)) if m else 0, task.id)


def _relative(path: Path, base: Path) -> str:
    try:
        return str(path.relative_to(base))
    except ValueError:
        return str(path)


@click.group()
@click.option('-C', '--directory', 'directory', type=click.Path(exists=True, file_okay=False, path_type=Path),
              help='Project directory to operate on (default: current directory).')
@click.option('-v', '--verbose', is_flag=True, help='Enable debug logging.')
@click.version_option(__version__, prog_name='sabin')
@click.pass_context
def cli(ctx, directory, verbose):
    """Workflow management CLI for agentic coding."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')
    ctx.obj = Path(os.path.abspath(directory)) if directory else Path.cwd()


@cli.command()
@click.option('-p', '--prefix', required=True, help='Project prefix for task IDs.')
@click.option('--padding', type=click.IntRange(min=1), default=4, show_default=True,
              help='Digits in generated task numbers.')
@click.pass_obj
@reports_errors
def init(project_dir, prefix, padding):
    """Initialize a .sabin directory in the project."""
    prefix = prefix.strip()
    if not prefix or '/' in prefix or '\\' in prefix:
        raise click.BadParameter(f'invalid prefix {prefix!r}', param_hint='--prefix')
    if root_type(project_dir) != 'none':
        raise RootExistsError(project_dir / ROOT_NAME,
                              'To link to a shared .sabin, remove the existing one and run: sabin link <path>')

    root = project_dir / ROOT_NAME
    for d in init_dirs(root):
        d.mkdir(parents=True, exist_ok=True)
    config = defaults()
    config.project_prefix = prefix
    config.task_number_padding = padding
    write_config(root, config)

    click.echo(click.style('Sabin project initialized.', fg='green'))
    for d in init_dirs(root):
        click.echo(f'  {_relative(d, project_dir)}/')
    click.echo(f'Project prefix set to: {prefix}')


@cli.command()
@click.argument('target', type=click.Path(path_type=Path))
@click.option('-y', '--yes', is_flag=True, help='Replace a local .sabin directory without asking.')
@click.pass_obj
@reports_errors
def link(project_dir, target, yes):
    """Link the project to the shared .sabin directory TARGET."""
    resolved = Path(os.path.abspath(project_dir / target))
    if not resolved.is_dir() or not config_path(resolved).is_file():
        raise click.ClickException(
            f'{target} is not a valid .sabin directory.\n'
            f'Expected to find config.json at: {config_path(resolved)}')

    local = project_dir / ROOT_NAME
    kind = root_type(project_dir)
    if kind == 'file':
        raise RootExistsError(local, 'Remove the existing link first to link to a different directory.')
    if kind == 'directory':
        if local == resolved:
            raise click.ClickException('Refusing to link .sabin to itself.')
        if not yes and not click.confirm(
                'Replace local .sabin directory with a link to the shared directory? '
                'This will DELETE the local directory.', default=False):
            click.echo('Cancelled')
            return
        shutil.rmtree(local)

    link_file = write_link(project_dir, resolved)
    click.echo(click.style('Linked to shared .sabin', fg='green'))
    click.echo(f'Target: {resolved}')
    click.echo(f'Link file: {link_file}')


@cli.group()
def task():
    """Manage tasks."""
    pass


@task.command('create')
@click.option('-t', '--title', help='Task title.')
@click.option('-c', '--content', default='', help='Task body (markdown).')
@click.option('-n', '--number', 'task_id', help='Custom task ID (e.g. JIRA-12345); generated when omitted.')
@click.pass_obj
@reports_errors
def create_task(project_dir, title, content, task_id):
    """Create a new task in tasks/open."""
    store = _store(project_dir)
    if title is None:
        title = click.prompt('Task title')
    t = store.create(title=title, content=content, task_id=task_id)
    click.echo(click.style(f'Created task: {t.id}', fg='green'))
    click.echo(f'Path: {t.path}')


@task.command('update')
@click.argument('task_id')
@click.argument('status')
@click.pass_obj
@reports_errors
def update_status(project_dir, task_id, status):
    """Set the status of TASK_ID to STATUS, moving its file if needed."""
    validate_status(status)
    store = _store(project_dir)
    old_path = store.locate(task_id)
    t = store.update_status(task_id, status)
    click.echo(click.style(f'Updated task {t.id} status to {t.status}', fg='green'))
    if t.path != old_path:
        click.echo(f'Moved from {_relative(old_path.parent, store.root)} to {_relative(t.path.parent, store.root)}')
    if t.working_dir:
        click.echo(f'Working directory: {t.working_dir}')


@task.command('list')
@click.option('-s', '--status', help='Only show tasks with this status.')
@click.pass_obj
@reports_errors
def list_tasks(project_dir, status):
    """Show a table of tasks."""
    store = _store(project_dir)
    tasks = store.list_tasks(status)
    if not tasks:
        click.echo(f'No tasks found with status: {status}' if status else 'No tasks found')
        return

    prefix = store.config().project_prefix
    rows = [
        (t.id, t.title or '', _styled_status(t.status), t.plan or '', t.working_dir or '')
        for t in sorted(tasks, key=lambda t: _sort_key(t, prefix))
    ]
    click.echo(tabulate(rows, headers=['ID', 'Title', 'Status', 'Plan', 'Working Dir'], tablefmt='github'))
    click.echo(f'\nTotal: {len(tasks)} task(s)')


@task.command('show')
@click.argument('task_id')
@click.pass_obj
@reports_errors
def show_task(project_dir, task_id):
    """Print a task's metadata and body."""
    t = _store(project_dir).find(task_id)
    click.echo(click.style(t.id, bold=True))
    click.echo(f'Path: {t.path}')
    for key, value in t.metadata().items():
        if value is None:
            continue
        shown = _styled_status(value) if key == 'status' else value
        click.echo(f'{key}: {shown}')
    if t.content.strip():
        click.echo('')
        click.echo(t.content.strip('\n'))


@task.command('delete')
@click.argument('task_id')
@click.option('-y', '--yes', is_flag=True, help='Do not ask for confirmation.')
@click.pass_obj
@reports_errors
def delete_task(project_dir, task_id, yes):
    """Delete the file of TASK_ID (exact id only)."""
    store = _store(project_dir)
    path = store.locate(task_id, exact=True)
    if not yes:
        click.confirm(f'Delete {path}?', abort=True)
    store.delete(task_id)
    click.echo(f'Deleted task {task_id}')


@task.command('check')
@click.pass_obj
@reports_errors
def check_tasks(project_dir):
    """Validate every task file under the root."""
    problems = _store(project_dir).check()
    if problems:
        for p in problems:
            click.echo(f'  {p.path}: {p.message}', err=True)
        click.echo(f'\nFound {len(problems)} problem(s).', err=True)
        sys.exit(1)
    click.echo('All task files OK.')


@task.command('organize')
@click.pass_obj
@reports_errors
def organize_tasks(project_dir):
    """Move task files into the directory their status calls for."""
    store = _store(project_dir)
    moves = store.organize()
    for src, dest in moves:
        click.echo(f'Moving {_relative(src, store.root)} -> {_relative(dest, store.root)}')
    click.echo(f'Moved {len(moves)} task(s).' if moves else 'Nothing to move.')


def main():
    cli()


if __name__ == '__main__':
    main()
