from __future__ import annotations

import logging
from typing import Optional

import typer
import uvicorn

from boosteam import __version__
from boosteam.config import get_settings

app = typer.Typer(add_completion=False, help="Boosteam API CLI")


@app.callback()
def _root() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@app.command()
def start(
    host: Optional[str] = typer.Option(None, help="Bind host"),
    port: Optional[int] = typer.Option(None, help="Bind port"),
    reload: bool = typer.Option(False, help="Auto-reload on changes (dev)"),
) -> None:
    settings = get_settings()
    uvicorn.run(
        "boosteam.api.app:app",
        host=host or settings.HOST,
        port=port or settings.PORT,
        reload=reload,
    )


@app.command()
def version() -> None:
    typer.echo(__version__)


@app.command("init-db")
def init_db_command() -> None:
    """Create all tables (no migrations)."""
    from boosteam.database import init_db

    init_db(create_tables=True)
    typer.echo("Tables created.")


@app.command()
def seed(
    demo: bool = typer.Option(False, help="Also run demo data seeders"),
) -> None:
    """
    Seed permissions, default roles and (optionally) the dev admin account.

    Safe to run repeatedly; see BOOSTEAM_BOOTSTRAP_MODE for the idempotence policy.
    """
    from boosteam.database import SessionLocal, init_db
    from boosteam.seeder import SeederRegistry

    init_db(create_tables=True)
    session = SessionLocal()
    try:
        SeederRegistry.run_all(session, include_demo=demo)
    finally:
        session.close()
    typer.echo("Seeding completed.")


@app.command("reset-rbac")
def reset_rbac(
    yes: bool = typer.Option(False, "--yes", help="Skip the confirmation prompt"),
) -> None:
    """Delete every role and permission, then seed the defaults again."""
    from boosteam.database import get_db_session
    from boosteam.security.rbac.bootstrap import reset_roles_and_permissions

    settings = get_settings()
    if settings.ENVIRONMENT == "production":
        typer.echo("Refusing to reset roles in production.", err=True)
        raise typer.Exit(code=1)
    if not yes:
        typer.confirm("This removes all roles, permissions and role assignments. Continue?", abort=True)

    with get_db_session() as session:
        result = reset_roles_and_permissions(session, mode=settings.BOOTSTRAP_MODE)
    typer.echo(
        f"Reset done: {result.permissions_created} permissions, {result.roles_created} roles."
    )


@app.command("create-user")
def create_user(
    username: str = typer.Option(..., help="Username"),
    password: str = typer.Option(..., prompt=True, hide_input=True, help="Password"),
    email: Optional[str] = typer.Option(None, help="Email"),
    roles: str = typer.Option("user", help="Comma-separated role names"),
) -> None:
    """Create an account and assign it the given roles."""
    from boosteam.database import get_db_session
    from boosteam.exceptions.handlers import BoosteamException
    from boosteam.security.auth.service import AuthService
    from boosteam.security.rbac.models import Role

    settings = get_settings()
    role_list = [r.strip() for r in (roles or "").split(",") if r.strip()]

    try:
        with get_db_session() as session:
            found = session.query(Role).filter(Role.name.in_(role_list)).all() if role_list else []
            missing = sorted(set(role_list) - {r.name for r in found})
            if missing:
                typer.echo(f"Unknown roles: {', '.join(missing)}", err=True)
                raise typer.Exit(code=1)

            svc = AuthService(
                session,
                password_min_length=settings.PASSWORD_MIN_LENGTH,
                password_iterations=settings.PASSWORD_HASH_ITERATIONS,
            )
            user = svc.register_user(
                username=username, password=password, email=email, default_role=None
            )
            user.roles = found
            session.flush()
            user_id = user.id
    except BoosteamException as exc:
        typer.echo(f"Error: {exc.message}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Created user {username} (id={user_id}) roles={role_list}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
