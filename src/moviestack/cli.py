"""CLI for the MovieStack client (search, watch log, user admin)."""

import asyncio
import json
from typing import Annotated, Any

import typer
from loguru import logger

from moviestack.api import MovieStackApi
from moviestack.config import resolve_storage_path
from moviestack.core.admin.users import UserAdmin
from moviestack.core.log.view import LogView
from moviestack.core.search.controller import SearchController, SearchStatus
from moviestack.identity import IdentityStore
from moviestack.logging_config import configure_logging
from moviestack.models.movie import AdminUser, Identity, LogEntry
from moviestack.protocols import ApiProtocol
from moviestack.storage import LocalStorage

app = typer.Typer(help="MovieStack: search movies and keep a watch log.")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    api_url: Annotated[
        str | None,
        typer.Option("--api-url", envvar="MOVIESTACK_API_URL", help="MovieStack service base URL"),
    ] = None,
) -> None:
    configure_logging(verbose=verbose, quiet=quiet)
    ctx.obj = {"api_url": api_url}


def _make_api(api_url: str | None) -> ApiProtocol:
    return MovieStackApi(base_url=api_url)


def _identity_store() -> IdentityStore:
    return IdentityStore(LocalStorage(resolve_storage_path()))


def _api(ctx: typer.Context) -> ApiProtocol:
    return _make_api((ctx.obj or {}).get("api_url"))


def _require_identity(store: IdentityStore) -> Identity:
    identity = store.load()
    if identity is None:
        typer.echo("No active user selected. Run 'moviestack login USER_ID' first.")
        raise typer.Exit(1)
    return identity


def _finish(result: dict[str, Any], message: str | None) -> None:
    """Echo the action outcome; failures exit non-zero."""
    if message:
        typer.echo(message)
    if not result["success"]:
        raise typer.Exit(1)


def _entry_line(entry: LogEntry) -> str:
    prefix = f"#{entry.rank_position} " if entry.rank_position is not None else ""
    line = f"  {prefix}{entry.title}  watched {entry.watched_on}  [log_id={entry.log_id}]"
    if entry.note:
        line += f"\n    note: {entry.note}"
    return line


@app.command()
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Search text"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Search the movie catalog."""
    identity = _identity_store().load()
    controller = SearchController(_api(ctx), identity=identity)

    async def run() -> None:
        controller.set_query(query)
        await controller.wait_settled()

    asyncio.run(run())

    if controller.status is SearchStatus.ERROR:
        typer.echo(controller.error or "Search failed")
        raise typer.Exit(1)

    if output_json:
        data = [
            {
                "id": m.id,
                "original_title": m.title,
                "adult": m.is_adult,
                "video": m.is_video,
                "popularity": m.popularity,
                "score": m.score,
            }
            for m in controller.results
        ]
        typer.echo(json.dumps(data, indent=2))
        return

    if controller.has_searched and not controller.results:
        typer.echo(f"No movies found for “{query}”")
        return

    for movie in controller.results:
        typer.echo(f"  {movie.title}  (popularity {movie.popularity:,})  [id={movie.id}]")
    if identity is None:
        typer.echo("\nLog in as a user to add movies to your log.")


@app.command()
def add(
    ctx: typer.Context,
    movie_id: int = typer.Argument(..., help="Catalog movie id"),
    watched_on: Annotated[
        str | None,
        typer.Option("--watched-on", "-w", help="Date watched (YYYY-MM-DD), default today"),
    ] = None,
    note: Annotated[str | None, typer.Option("--note", "-n", help="Free-text note")] = None,
) -> None:
    """Add a movie to the active user's log."""
    view = LogView(_api(ctx), _require_identity(_identity_store()))
    result = asyncio.run(view.add(movie_id, watched_on=watched_on, note=note))
    _finish(result, view.feedback.message)


@app.command(name="log")
def show_log(
    ctx: typer.Context,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Show the active user's log, ranked entries first."""
    identity = _require_identity(_identity_store())
    view = LogView(_api(ctx), identity)
    if not asyncio.run(view.load()):
        typer.echo(view.feedback.message or "Failed to load movie log")
        raise typer.Exit(1)

    if output_json:
        typer.echo(
            json.dumps(
                {
                    "ranked": [_entry_dict(e) for e in view.ranked],
                    "unranked": [_entry_dict(e) for e in view.unranked],
                },
                indent=2,
            )
        )
        return

    typer.echo(f"Viewing as {identity.username}\n")
    typer.echo("Ranked")
    ranked = view.ranked
    typer.echo("\n".join(_entry_line(e) for e in ranked) if ranked else "  No ranked movies yet.")
    typer.echo("\nUnranked")
    unranked = view.unranked
    typer.echo(
        "\n".join(_entry_line(e) for e in unranked)
        if unranked
        else "  No unranked movies yet. Add one from search."
    )


def _entry_dict(entry: LogEntry) -> dict[str, Any]:
    return {
        "log_id": entry.log_id,
        "movie_id": entry.movie_id,
        "original_title": entry.title,
        "watched_on": entry.watched_on,
        "note": entry.note,
        "rank_position": entry.rank_position,
    }


@app.command()
def delete(
    ctx: typer.Context,
    log_id: int = typer.Argument(..., help="Log entry id"),
) -> None:
    """Delete an entry from the active user's log."""
    view = LogView(_api(ctx), _require_identity(_identity_store()))

    async def run() -> dict[str, Any]:
        # Loaded first so the confirmation can name the movie.
        await view.load()
        return await view.delete(log_id)

    result = asyncio.run(run())
    _finish(result, view.feedback.message)


@app.command()
def users(ctx: typer.Context) -> None:
    """List users (admin)."""
    admin = UserAdmin(_api(ctx), _identity_store())
    if not asyncio.run(admin.refresh()):
        typer.echo(admin.feedback.message or "Failed to load users")
        raise typer.Exit(1)

    if not admin.users:
        typer.echo("No users yet. Create one with 'moviestack create-user NAME'.")
        return
    active = admin.identity_store.load()
    for user in admin.users:
        marker = "*" if active is not None and active.id == user.id else " "
        typer.echo(f"{marker} {user.username}  ID: {user.id}  created {user.created_at}")


@app.command(name="create-user")
def create_user_cmd(
    ctx: typer.Context,
    username: str = typer.Argument(..., help="Username for the new user"),
) -> None:
    """Create a user (admin)."""
    admin = UserAdmin(_api(ctx), _identity_store())
    result = asyncio.run(admin.create(username))
    # A failed refresh after a successful create would mask the outcome.
    _finish(result, f'Created user "{result["username"]}"' if result["success"] else result["error"])


def _find_user(admin: UserAdmin, user_id: int) -> AdminUser:
    if not asyncio.run(admin.refresh()):
        typer.echo(admin.feedback.message or "Failed to load users")
        raise typer.Exit(1)
    user = next((u for u in admin.users if u.id == user_id), None)
    if user is None:
        typer.echo(f"User {user_id} not found.")
        raise typer.Exit(1)
    return user


@app.command(name="delete-user")
def delete_user_cmd(
    ctx: typer.Context,
    user_id: int = typer.Argument(..., help="User id"),
) -> None:
    """Delete a user (admin)."""
    admin = UserAdmin(_api(ctx), _identity_store())
    user = _find_user(admin, user_id)
    result = asyncio.run(admin.delete(user))
    _finish(result, f'Deleted user "{user.username}"' if result["success"] else result["error"])


@app.command()
def login(
    ctx: typer.Context,
    user_id: int = typer.Argument(..., help="User id to act as"),
) -> None:
    """Act as another user. No authentication is applied."""
    admin = UserAdmin(_api(ctx), _identity_store())
    identity = admin.login_as(_find_user(admin, user_id))
    logger.debug("Logged in as {}", identity)
    typer.echo(f"Viewing as {identity.username} (ID: {identity.id})")


@app.command()
def logout() -> None:
    """Clear the active user."""
    _identity_store().clear()
    typer.echo("Active user cleared.")


@app.command()
def whoami() -> None:
    """Show the active user."""
    identity = _identity_store().load()
    if identity is None:
        typer.echo("No active user selected.")
        return
    typer.echo(f"Viewing as {identity.username} (ID: {identity.id})")
