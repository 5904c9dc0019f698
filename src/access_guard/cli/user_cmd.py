"""Account commands: bootstrap the first super admin, list accounts."""

import asyncio

import typer

user_app = typer.Typer()


@user_app.command("create")
def create_user(
    name: str = typer.Option(..., prompt=True, help="Full name"),
    email: str = typer.Option(..., prompt=True, help="Email address (login name)"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password"),
    role: str = typer.Option("super_admin", prompt=True, help="resident, security, admin or super_admin"),
    phone: str = typer.Option("", "--phone", help="Contact phone"),
    unit_number: str | None = typer.Option(None, "--unit", help="Unit number; residents get a profile when set"),
    block: str | None = typer.Option(None, "--block", help="Block or building of the unit"),
    if_not_exists: bool = typer.Option(False, "--if-not-exists", help="Succeed quietly when the email is taken"),
) -> None:
    """Create an account without an acting admin.

    Role ceilings do not apply here, which is what makes this the way to
    seed the first ``super_admin`` of a fresh deployment.
    """
    from pydantic import ValidationError as SchemaValidationError

    from access_guard.schemas.user import UserCreateRequest

    try:
        request = UserCreateRequest(
            name=name,
            email=email,
            phone=phone,
            password=password,
            role=role,
            unit_number=unit_number,
            block=block,
        )
    except SchemaValidationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    asyncio.run(_create_user(request, if_not_exists=if_not_exists))


async def _create_user(request, *, if_not_exists: bool) -> None:  # type: ignore[no-untyped-def]
    from access_guard.core.config import get_settings
    from access_guard.core.database import standalone_session
    from access_guard.core.errors import ConflictError
    from access_guard.services.user_service import create_user

    settings = get_settings()
    async with standalone_session(settings.database_url, schema=settings.database_schema) as session:
        try:
            user = await create_user(session, request)
        except ConflictError as e:
            if if_not_exists:
                typer.echo(f"User '{request.email}' already exists, skipping (--if-not-exists)")
                return
            typer.echo(f"Error: {e.message}", err=True)
            raise typer.Exit(code=1) from e

    typer.echo(f"User '{user.email}' created with role '{user.role}'")


@user_app.command("list")
def list_users() -> None:
    """Print every account as a table."""
    asyncio.run(_list_users())


async def _list_users() -> None:
    from access_guard.core.config import get_settings
    from access_guard.core.database import standalone_session
    from access_guard.services.user_service import list_users

    settings = get_settings()
    async with standalone_session(settings.database_url, schema=settings.database_schema) as session:
        users, total = await list_users(session, page=1, page_size=1000)

    typer.echo(f"{'Name':<24} {'Email':<32} {'Role':<12} {'Unit':<8} {'Status':<10}")
    typer.echo("-" * 88)
    for user in users:
        unit = user.resident_profile.unit_number if user.resident_profile is not None else "-"
        typer.echo(f"{user.name:<24} {user.email:<32} {user.role:<12} {unit:<8} {user.status:<10}")
    typer.echo(f"\nTotal: {total}")
