import click
from getpass import getpass

from runalyze_dump.clients.exc import RunalyzeError
from runalyze_dump.config import ConfigError, load_settings
from runalyze_dump.crypto import encrypt_password
from runalyze_dump.dates import DateValidationError, validate_and_parse_dates
from runalyze_dump.logger import setup_logging
from runalyze_dump.services.presentation import PresentationService
from runalyze_dump.services.runner import download as run_download


@click.group()
@click.option('--config', 'config_file', type=click.Path(dir_okay=False),
              help='Config file (default: ~/.runalyzedump/runalyzedump.yaml)')
@click.pass_context
def cli(ctx, config_file):
    """Back up your Runalyze activities as FIT/TCX files."""
    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config_file


@cli.command()
@click.option('--username', help='Runalyze username')
@click.option('--password', help='Runalyze password')
@click.option('--cookie-path', type=click.Path(dir_okay=False), help='Path to cookie file')
@click.option('--save-dir', type=click.Path(file_okay=False), help='Directory to save downloaded files')
@click.option('--until', 'until_str', default='',
              help='Date to start from (YYYY-MM-DD, YYYY-MM, or YYYY). Default: next Monday')
@click.option('--since', 'since_str', default='',
              help='Date to stop at (YYYY-MM-DD, YYYY-MM, YYYY) or duration ago (30d, 2w, 1y, 6m). Default: 4w')
@click.option('--json', 'json_mode', is_flag=True,
              help='Output structured logs and a JSON summary to stdout (for cron/systemd)')
@click.pass_context
def download(ctx, username, password, cookie_path, save_dir, until_str, since_str, json_mode):
    """Download activities from Runalyze."""
    # Validate dates first, before any other operations
    try:
        validate_and_parse_dates(until_str, since_str)
    except DateValidationError as e:
        click.echo(f"Error: {e}", err=True)
        raise click.Abort()

    try:
        settings = load_settings(
            ctx.obj.get('config_file'),
            username=username,
            password=password,
            cookie_path=cookie_path,
            save_dir=save_dir,
        )
    except (ConfigError, ValueError) as e:
        click.echo(f"Configuration error: {e}", err=True)
        raise click.Abort()

    setup_logging(settings.log_level, console=json_mode)
    presentation = PresentationService(json_mode=json_mode)

    try:
        run_download(settings, until_str, since_str, presentation)
    except (RunalyzeError, ValueError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        raise click.Abort()


@cli.command('encrypt-password')
def encrypt_password_command():
    """Encrypt a password for the password_encrypted config setting."""
    password = getpass("Runalyze password: ")
    confirm = getpass("Confirm password: ")

    if password != confirm:
        click.echo("Error: Passwords do not match!", err=True)
        raise click.Abort()

    click.echo(f"password_encrypted: {encrypt_password(password)}")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == '__main__':
    main()
