"""Application bootstrap: CLI entry point, headless export and the Qt launcher."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import os
import sys
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Sequence, TextIO, cast

from .compiler.adapters import AdapterRegistry, load_callable
from .compiler.validator import Parser
from .errors import WorkspaceError
from .events import DatasetExported, NoticePosted
from .services.kv_store import JsonFileKeyValueStore
from .services.persistence import WorkspacePersistence
from .services.settings import AppSettings, load_app_settings, parse_adapter_modules
from .utils import logging as logging_utils
from .workspace.capabilities import DialogProvider, DirectoryDownloadSink, DownloadSink
from .workspace.controller import WorkspaceController

__all__ = [
    "QtRuntime",
    "configure_logging",
    "build_parser",
    "build_registry",
    "build_controller",
    "run_export",
    "create_qapp",
    "main",
]

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class QtRuntime:
    """Container returned by :func:`create_qapp`."""

    app: Any
    loop: asyncio.AbstractEventLoop


def configure_logging(settings: AppSettings) -> None:
    log_path = logging_utils.setup_logging(settings)
    _LOGGER.debug("Logging to %s (debug=%s)", log_path, settings.debug_logging)


def build_parser(settings: AppSettings) -> Parser:
    """Load the Chatito parser named by ``settings.parser_module``."""

    if not settings.parser_module:
        raise WorkspaceError(
            "No Chatito parser configured; set CHATITO_WORKSPACE_PARSER or --set parser_module=module:attr"
        )
    try:
        return cast(Parser, load_callable(settings.parser_module))
    except (ImportError, AttributeError, TypeError, ValueError) as exc:
        raise WorkspaceError(f"Unable to load parser {settings.parser_module}: {exc}") from exc


def build_registry(settings: AppSettings) -> AdapterRegistry:
    return AdapterRegistry.from_targets(parse_adapter_modules(settings.adapter_modules))


def build_controller(
    settings: AppSettings,
    *,
    parser: Parser | None = None,
    registry: AdapterRegistry | None = None,
    dialogs: DialogProvider | None = None,
    sink: DownloadSink | None = None,
) -> WorkspaceController:
    """Assemble a controller backed by the JSON store at ``settings.store_path``."""

    persistence = WorkspacePersistence(JsonFileKeyValueStore(settings.store_path))
    return WorkspaceController(
        parser or build_parser(settings),
        registry or build_registry(settings),
        persistence=persistence,
        dialogs=dialogs,
        sink=sink or DirectoryDownloadSink(settings.export_dir),
        debounce_seconds=settings.debounce_seconds,
        stagger_seconds=settings.download_stagger_seconds,
    )


async def run_export(
    settings: AppSettings,
    *,
    out_dir: Path | str | None = None,
    adapter_format: str | None = None,
    parser: Parser | None = None,
    registry: AdapterRegistry | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Compile the persisted workspace and write both datasets; returns an exit code."""

    out = stdout or sys.stdout
    err = stderr or sys.stderr
    controller = build_controller(
        settings,
        parser=parser,
        registry=registry,
        sink=DirectoryDownloadSink(out_dir or settings.export_dir),
    )

    def _print_notice(event: NoticePosted) -> None:
        print(event.message, file=err)

    def _print_exported(event: DatasetExported) -> None:
        print(event.training_name, file=out)
        print(event.testing_name, file=out)

    controller.event_bus.subscribe(NoticePosted, _print_notice)
    controller.event_bus.subscribe(DatasetExported, _print_exported)

    if adapter_format:
        # Applied to this run only; the persisted selection is left alone.
        try:
            controller.selection.set_format(adapter_format)
        except ValueError as exc:
            print(str(exc), file=err)
            return 2

    if not controller.request_export_view():
        state = controller.validation_state
        if state.message:
            print(f"{controller.store.active_document.title}: {state.message}", file=err)
        return 1
    result = await controller.export()
    return 0 if result is not None else 1


def create_qapp() -> QtRuntime:
    """Create a qasync-powered QApplication instance."""

    from PySide6.QtWidgets import QApplication
    from qasync import QEventLoop

    os.environ.setdefault("QT_ENABLE_HIGHDPI_SCALING", "1")
    app = cast(Any, QApplication.instance() or QApplication(sys.argv))
    app.setApplicationName("Chatito workspace")
    app.setApplicationDisplayName("Chatito workspace")

    loop = QEventLoop(app)
    asyncio.set_event_loop(loop)
    app.aboutToQuit.connect(loop.stop)  # type: ignore[attr-defined]
    return QtRuntime(app=app, loop=loop)


def run_gui(settings: AppSettings) -> int:
    runtime = create_qapp()

    from .ui.qt_surface import QtDialogs
    from .ui.window import WorkspaceWindow

    window_holder: list[Any] = []
    dialogs = QtDialogs(lambda: window_holder[0] if window_holder else None)
    controller = build_controller(settings, dialogs=dialogs)
    window = WorkspaceWindow(controller)
    window_holder.append(window)
    window.resize(1100, 720)
    window.show()

    loop = runtime.loop
    try:
        loop.run_forever()
    except KeyboardInterrupt:  # pragma: no cover - manual shutdown path
        _LOGGER.info("Shutdown requested by user.")
    finally:
        controller.validation.cancel()
        _drain_event_loop(loop)
        loop.close()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point invoked by the ``chatito-workspace`` console script."""

    args = _parse_cli_args(argv)

    try:
        overrides = _coerce_cli_overrides(args.overrides or [])
    except ValueError as exc:
        print(f"Invalid --set override: {exc}", file=sys.stderr)
        return 2
    if args.store:
        overrides["store_path"] = str(Path(args.store).expanduser())
    settings = load_app_settings(overrides or None)
    configure_logging(settings)

    if args.dump_settings:
        _dump_settings(settings)
        return 0

    try:
        if args.command == "export":
            return asyncio.run(run_export(settings, out_dir=args.out, adapter_format=args.format))
        return run_gui(settings)
    except WorkspaceError as exc:
        print(str(exc), file=sys.stderr)
        return 2


def _drain_event_loop(loop: asyncio.AbstractEventLoop) -> None:
    """Cancel outstanding tasks before closing the loop."""

    if loop.is_closed():
        return

    async def _cleanup() -> None:
        current_task = None
        with contextlib.suppress(RuntimeError):
            current_task = asyncio.current_task(loop=loop)
        tasks = [task for task in asyncio.all_tasks(loop) if not task.done() and task is not current_task]
        if tasks:
            _LOGGER.debug("Canceling %s pending asyncio task(s) before shutdown.", len(tasks))
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
        with contextlib.suppress(RuntimeError, NotImplementedError):
            await loop.shutdown_asyncgens()

    try:
        loop.run_until_complete(_cleanup())
    except RuntimeError as exc:  # pragma: no cover - loop already stopping
        _LOGGER.debug("Unable to drain asyncio loop: %s", exc)


def _parse_cli_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="chatito-workspace",
        description="Edit, validate and export multi-document Chatito workspaces.",
    )
    parser.add_argument(
        "--store",
        metavar="PATH",
        help="Workspace store file (default ~/.chatito_workspace/workspace.json).",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Override a runtime setting (repeatable).",
    )
    parser.add_argument(
        "--dump-settings",
        action="store_true",
        help="Print the effective settings as JSON and exit.",
    )
    subparsers = parser.add_subparsers(dest="command")
    export = subparsers.add_parser("export", help="Compile the stored workspace and write both datasets.")
    export.add_argument("--out", metavar="DIR", help="Directory receiving the dataset files.")
    export.add_argument("--format", metavar="FORMAT", help="Dataset format for this run only.")
    subparsers.add_parser("gui", help="Launch the desktop editor (default).")
    return parser.parse_args(argv)


def _coerce_cli_overrides(items: Sequence[str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    known = {item.name for item in fields(AppSettings)}
    for entry in items:
        if "=" not in entry:
            raise ValueError(f"Override '{entry}' must use KEY=VALUE syntax.")
        key, raw_value = entry.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError("Override is missing a field name.")
        if key not in known:
            raise ValueError(f"Unknown setting '{key}'.")
        overrides[key] = raw_value.strip()
    return overrides


def _dump_settings(settings: AppSettings, stream: TextIO | None = None) -> None:
    payload = asdict(settings)
    payload["debounce_seconds"] = settings.debounce_seconds
    target = stream or sys.stdout
    json.dump(payload, target, indent=2, sort_keys=True)
    target.write("\n")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
