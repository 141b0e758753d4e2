"""CLI tools for creator program administration."""

import socket

import click

from creator_program.core.exceptions import CreatorProgramError
from creator_program.db.enums import AdminRole
from creator_program.db.session import SessionLocal, sweep_session


@click.group()
def cli():
    """Creator program CLI tools."""
    pass


@cli.command()
def sync_all():
    """
    Run the follower sweep once.

    Takes the same scheduler lock as the cron endpoint, so it is safe to run
    while the API is serving traffic.

    Example:
        creator-program sync-all
    """
    from creator_program.services import sweep_service

    with sweep_session() as db:
        try:
            result = sweep_service.run_sync_all(db, holder=f"cli@{socket.gethostname()}")
        except CreatorProgramError as e:
            click.echo(f"❌ {e.message}")
            raise SystemExit(1)

    click.echo("✓ Sweep finished")
    click.echo(f"  Processed: {result.processed}")
    click.echo(f"  Below threshold: {result.low_followers}")
    click.echo(f"  Recovered: {result.recovered}")
    click.echo(f"  Reminded: {result.reminded}")
    click.echo(f"  Removed: {result.removed}")
    click.echo(f"  Repaired subscriptions: {result.repaired}")
    if result.failed:
        click.echo(f"  Failed: {result.failed}")
    if result.timed_out:
        click.echo("→ Stopped at the sweep deadline; remaining creators run next time")


@cli.command()
@click.option("--email", required=True, help="Admin email address")
@click.option("--name", "display_name", default="", help="Display name")
@click.option(
    "--role",
    type=click.Choice([r.value for r in AdminRole]),
    default=AdminRole.ADMIN.value,
    show_default=True,
    help="Primary role",
)
@click.option(
    "--extra-role",
    "extra_roles",
    multiple=True,
    type=click.Choice([r.value for r in AdminRole]),
    help="Additional role (repeatable)",
)
def grant_admin(email: str, display_name: str, role: str, extra_roles: tuple[str, ...]):
    """
    Create or update an admin directory record.

    Example:
        creator-program grant-admin --email "owner@example.com" --role owner
    """
    from creator_program.services import admin_directory_service

    db = SessionLocal()
    try:
        admin = admin_directory_service.upsert_admin(
            db,
            email=email,
            display_name=display_name,
            role=AdminRole(role),
            extra_roles=[AdminRole(r) for r in extra_roles],
        )
        click.echo(f"✓ Admin {admin.email}")
        click.echo(f"  ID: {admin.id}")
        click.echo(f"  Roles: {', '.join(sorted(admin.role_set))}")
    finally:
        db.close()


@cli.command()
def worker():
    """Run the background job worker."""
    from creator_program.worker import main as worker_main

    worker_main()


if __name__ == "__main__":
    cli()
