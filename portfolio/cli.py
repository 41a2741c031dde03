import click


@click.group()
def main() -> None:
    """Portfolio - backend for the portfolio site and its admin UI."""


@main.command()
@click.option("--host", default=None, help="Bind host (default: from PORTFOLIO_HOST or 0.0.0.0).")
@click.option("--port", default=None, type=int, help="Bind port (default: from PORTFOLIO_PORT or 3001).")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload for development.")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the API server."""
    import uvicorn

    from portfolio.backend.settings import PortfolioSettings

    settings = PortfolioSettings()

    uvicorn.run(
        "portfolio.backend.app:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level="warning",  # uvicorn's own logging is intercepted by loguru
    )


@main.command("create-admin")
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True, help="Password for the new user.")
@click.option("--role", default="admin", show_default=True, help="Role stored in the user metadata.")
def create_admin(email: str, password: str, role: str) -> None:
    """Create an admin user in the identity provider.

    Requires PORTFOLIO_SUPABASE_URL and PORTFOLIO_SUPABASE_SERVICE_ROLE_KEY.
    """
    import asyncio

    from portfolio.backend.identity import IdentityProviderError, SupabaseIdentityProvider
    from portfolio.backend.log import setup_logging
    from portfolio.backend.settings import PortfolioSettings

    settings = PortfolioSettings()
    setup_logging(settings.log_level)

    if not settings.supabase_url or settings.supabase_service_role_key is None:
        msg = "PORTFOLIO_SUPABASE_URL and PORTFOLIO_SUPABASE_SERVICE_ROLE_KEY must be set."
        raise click.ClickException(msg)

    service_key = settings.supabase_service_role_key.get_secret_value()
    provider = SupabaseIdentityProvider(settings.supabase_url, settings.supabase_anon_key or service_key)

    async def _run() -> dict:
        try:
            return await provider.create_user(email, password, service_role_key=service_key, role=role)
        finally:
            await provider.aclose()

    try:
        user = asyncio.run(_run())
    except IdentityProviderError as e:
        raise click.ClickException(str(e)) from None

    click.echo(f"Admin user created: {user.get('email', email)} (id={user.get('id')})")


# ---------------------------------------------------------------------------
# Database management
# ---------------------------------------------------------------------------


def _alembic_config():
    """Build an Alembic Config from the package's alembic.ini.

    Both alembic.ini and the alembic/ directory live inside the package,
    so this works whether running from source or from an installed package.
    """
    from pathlib import Path

    from alembic.config import Config

    ini_path = Path(__file__).parent / "backend" / "alembic.ini"
    cfg = Config(str(ini_path))
    return cfg


@main.group()
def db() -> None:
    """Database migration commands (table-backed project store)."""


@db.command()
@click.option("--revision", default="head", help="Target revision (default: head).")
def upgrade(revision: str) -> None:
    """Run database migrations forward."""
    from alembic import command

    command.upgrade(_alembic_config(), revision)
    click.echo(f"Database upgraded to {revision}.")


@db.command()
@click.option("--revision", default="-1", help="Target revision (default: -1, one step back).")
def downgrade(revision: str) -> None:
    """Roll back database migrations."""
    from alembic import command

    command.downgrade(_alembic_config(), revision)
    click.echo(f"Database downgraded to {revision}.")


@db.command()
def current() -> None:
    """Show current database revision."""
    from alembic import command

    command.current(_alembic_config(), verbose=True)


@db.command()
def history() -> None:
    """Show migration history."""
    from alembic import command

    command.history(_alembic_config(), verbose=True)


if __name__ == "__main__":
    main()
