"\"\"\"Typer CLI entrypoint for the admission workflow.\"\"\""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional

import typer
import yaml

from .config import load_settings
from .container import create_container
from .core import WrittenExamResults
from .errors import AdmissionError, NotFoundError, TemporalError
from .logging import configure_logging
from .service import AdmissionService

app = typer.Typer(help="Competitive admission: dossiers, ranking and decisions.")
position_app = typer.Typer(help="Manage positions.")
catalog_app = typer.Typer(help="Manage degree and bac-specialty catalogs.")
app.add_typer(position_app, name="position")
app.add_typer(catalog_app, name="catalog")

DEFAULT_STORE = Path("concours-state.json")


@app.callback()
def main_options(
    ctx: typer.Context,
    store: Optional[Path] = typer.Option(None, dir_okay=False, help="JSON state file."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("WARNING", help="Log level for structured logging."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
) -> None:
    settings: dict[str, Any] = {}
    if config:
        try:
            settings = load_settings(config)
        except (yaml.YAMLError, ValueError) as exc:
            raise typer.BadParameter(f"Invalid config file: {exc}", param_name="config") from exc

    if store is not None or not settings.get("store", {}).get("path"):
        settings.setdefault("store", {})["path"] = str(store or DEFAULT_STORE)
    if audit_log is not None:
        settings.setdefault("audit", {})["path"] = str(audit_log)

    configure_logging(log_level)
    container = create_container(settings=settings)
    ctx.obj = container.service()


def _service(ctx: typer.Context) -> AdmissionService:
    return ctx.obj


def _echo(payload: Any) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


def _read_mapping(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise typer.BadParameter(f"{path} must contain an object")
    return loaded


def _fail(exc: Exception) -> typer.Exit:
    typer.echo(f"Error: {exc}", err=True)
    if isinstance(exc, NotFoundError):
        return typer.Exit(code=2)
    if isinstance(exc, TemporalError):
        return typer.Exit(code=3)
    return typer.Exit(code=1)


@app.command()
def submit(
    ctx: typer.Context,
    draft: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False, help="Dossier JSON/YAML."),
) -> None:
    """Submit a dossier and print the assigned id and credential."""
    try:
        applicant = _service(ctx).submit(_read_mapping(draft))
    except AdmissionError as exc:
        raise _fail(exc) from exc
    _echo({"id": applicant.id, "email": applicant.email, "password": applicant.password})


@app.command("update-profile")
def update_profile(
    ctx: typer.Context,
    applicant_id: str,
    patch: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False, help="Patch JSON/YAML."),
) -> None:
    """Apply a self-service edit to a dossier."""
    try:
        applicant = _service(ctx).update_profile(applicant_id, _read_mapping(patch))
    except AdmissionError as exc:
        raise _fail(exc) from exc
    _echo(applicant.model_dump(mode="json", exclude={"password"}))


@app.command("set-status")
def set_status(ctx: typer.Context, applicant_id: str, status: str) -> None:
    """Record an administrator decision (pending, accepted, rejected)."""
    try:
        _service(ctx).set_status(applicant_id, status)  # type: ignore[arg-type]
    except AdmissionError as exc:
        raise _fail(exc) from exc
    typer.echo(f"{applicant_id}: {status}")


@app.command("accept-pending")
def accept_pending(ctx: typer.Context) -> None:
    """Accept every pending dossier at once."""
    count = _service(ctx).bulk_accept_pending()
    typer.echo(f"Accepted {count} pending applicants.")


@app.command()
def rank(
    ctx: typer.Context,
    position: str,
    written_results: Optional[Path] = typer.Option(
        None, exists=True, readable=True, dir_okay=False, help="Written-exam marks by applicant id."
    ),
) -> None:
    """Print the written-stage funnel and, with marks, the oral-stage funnel."""
    service = _service(ctx)
    payload: dict[str, Any] = {
        "position": position,
        "title": service.position_title(position),
        "written_stage": [asdict(row) for row in service.rank_for_position(position)],
    }
    if written_results:
        key = WrittenExamResults(_read_mapping(written_results))
        payload["oral_stage"] = [asdict(row) for row in service.rank_oral_stage(position, key)]
    _echo(payload)


@app.command()
def ranking(ctx: typer.Context) -> None:
    """Print every applicant ordered by score (display only)."""
    _echo([asdict(row) for row in _service(ctx).global_ranking()])


@app.command()
def standing(ctx: typer.Context, applicant_id: str) -> None:
    """Print the candidate-portal standing for one applicant."""
    try:
        result = _service(ctx).candidate_standing(applicant_id)
    except AdmissionError as exc:
        raise _fail(exc) from exc
    _echo(asdict(result))


@app.command()
def notifications(
    ctx: typer.Context,
    applicant_id: str,
    mark_read: bool = typer.Option(False, "--mark-read", help="Mark all as read after listing."),
) -> None:
    """List an applicant's notifications, oldest first."""
    service = _service(ctx)
    try:
        entries = service.get_notifications(applicant_id)
        if mark_read:
            service.mark_all_read(applicant_id)
    except AdmissionError as exc:
        raise _fail(exc) from exc
    _echo([entry.model_dump(mode="json") for entry in entries])


@app.command()
def changes(ctx: typer.Context, since: int = typer.Option(0, help="Last sequence already seen.")) -> None:
    """Print change events newer than a cursor."""
    _echo([event.model_dump(mode="json") for event in _service(ctx).changes_since(since)])


@app.command("save-config")
def save_config(
    ctx: typer.Context,
    bac_weight: Optional[float] = typer.Option(None),
    grad_weight: Optional[float] = typer.Option(None),
    written_exam_count: Optional[int] = typer.Option(None),
    oral_exam_count: Optional[int] = typer.Option(None),
    deadline: Optional[str] = typer.Option(None, help="ISO-8601 instant; empty string clears it."),
) -> None:
    """Update the scoring weights, funnel capacities and deadline."""
    service = _service(ctx)
    values = service.score_config().model_dump()
    overrides = {
        "bac_weight": bac_weight,
        "grad_weight": grad_weight,
        "written_exam_count": written_exam_count,
        "oral_exam_count": oral_exam_count,
        "deadline": deadline,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    try:
        saved = service.save_score_config(values)
    except AdmissionError as exc:
        raise _fail(exc) from exc
    _echo(saved.model_dump(mode="json"))


@app.command("show-config")
def show_config(ctx: typer.Context) -> None:
    """Print the score configuration and the submission window."""
    service = _service(ctx)
    countdown = service.time_left()
    _echo(
        {
            "config": service.score_config().model_dump(mode="json"),
            "submissions_open": service.submissions_open(),
            "time_left": asdict(countdown) if countdown else None,
        }
    )


@app.command()
def login(ctx: typer.Context, email: str, password: str) -> None:
    """Check applicant credentials."""
    applicant = _service(ctx).login(email, password)
    if applicant is None:
        typer.echo("Invalid email or password.", err=True)
        raise typer.Exit(code=1)
    _echo({"id": applicant.id, "full_name": applicant.full_name, "status": applicant.status})


@app.command("reset-password")
def reset_password(ctx: typer.Context, email: str) -> None:
    """Issue a new credential for a registered email."""
    password = _service(ctx).reset_password(email)
    if password is None:
        typer.echo("No applicant registered with this email.", err=True)
        raise typer.Exit(code=2)
    _echo({"email": email, "password": password})


@position_app.command("add")
def position_add(
    ctx: typer.Context,
    code: str,
    title: str,
    open_positions: int = typer.Option(1, min=1),
) -> None:
    try:
        _service(ctx).add_position({"code": code, "title": title, "open_positions": open_positions})
    except AdmissionError as exc:
        raise _fail(exc) from exc
    typer.echo(f"Position {code} added.")


@position_app.command("update")
def position_update(
    ctx: typer.Context,
    code: str,
    title: str,
    new_code: Optional[str] = typer.Option(None),
    open_positions: Optional[int] = typer.Option(None, min=1, help="Defaults to the stored capacity."),
) -> None:
    service = _service(ctx)
    try:
        current = service.catalog.get_position(code)
        service.update_position(
            code,
            {
                "code": new_code or code,
                "title": title,
                "open_positions": open_positions or current.open_positions,
            },
        )
    except AdmissionError as exc:
        raise _fail(exc) from exc
    typer.echo(f"Position {code} updated.")


@position_app.command("remove")
def position_remove(ctx: typer.Context, code: str) -> None:
    try:
        _service(ctx).remove_position(code)
    except AdmissionError as exc:
        raise _fail(exc) from exc
    typer.echo(f"Position {code} removed.")


@position_app.command("publish")
def position_publish(
    ctx: typer.Context,
    code: str,
    unpublish: bool = typer.Option(False, "--unpublish", help="Hide from new submissions."),
) -> None:
    try:
        _service(ctx).publish_position(code, not unpublish)
    except AdmissionError as exc:
        raise _fail(exc) from exc
    typer.echo(f"Position {code} {'unpublished' if unpublish else 'published'}.")


@position_app.command("list")
def position_list(ctx: typer.Context) -> None:
    _echo([p.model_dump(mode="json") for p in _service(ctx).catalog.positions()])


@catalog_app.command("add")
def catalog_add(ctx: typer.Context, catalog: str, value: str, label: str) -> None:
    try:
        _service(ctx).add_list_item(catalog, {"value": value, "label": label})  # type: ignore[arg-type]
    except AdmissionError as exc:
        raise _fail(exc) from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_name="catalog") from exc
    typer.echo(f"{catalog}: {value} added.")


@catalog_app.command("update")
def catalog_update(
    ctx: typer.Context,
    catalog: str,
    value: str,
    label: str,
    new_value: Optional[str] = typer.Option(None),
) -> None:
    try:
        _service(ctx).update_list_item(  # type: ignore[arg-type]
            catalog, value, {"value": new_value or value, "label": label}
        )
    except AdmissionError as exc:
        raise _fail(exc) from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_name="catalog") from exc
    typer.echo(f"{catalog}: {value} updated.")


@catalog_app.command("remove")
def catalog_remove(ctx: typer.Context, catalog: str, value: str) -> None:
    try:
        _service(ctx).remove_list_item(catalog, value)  # type: ignore[arg-type]
    except AdmissionError as exc:
        raise _fail(exc) from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_name="catalog") from exc
    typer.echo(f"{catalog}: {value} removed.")


@catalog_app.command("list")
def catalog_list(ctx: typer.Context, catalog: str) -> None:
    try:
        items = _service(ctx).catalog.items(catalog)  # type: ignore[arg-type]
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_name="catalog") from exc
    _echo([item.model_dump(mode="json") for item in items])


def main() -> None:
    app()


if __name__ == "__main__":
    main()
