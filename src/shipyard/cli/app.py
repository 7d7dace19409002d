# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/cli/app.py
import signal
import threading
from pathlib import Path
from typing import List

import typer

from shipyard.config.loader import ConfigError, load_config, load_manifests
from shipyard.config.models import ControllerConfig
from shipyard.controllers.app_controller import AppReconciler
from shipyard.controllers.manager import Controller
from shipyard.helm.cli_runner import HelmCliRunner
from shipyard.logging.log import init_logging
from shipyard.observers.jsonfile import JsonFileObserver
from shipyard.observers.logger import LoggerObserver
from shipyard.pools.registry import PoolRegistry
from shipyard.store.errors import NotFoundError
from shipyard.store.interface import ObjectStore
from shipyard.store.kube import KubeStore
from shipyard.store.memory import MemoryStore
from shipyard.templates.storage import Storage, ensure_default_templates, read_directory


app = typer.Typer(help="Shipyard App controller")
templates_cli = typer.Typer(help="Manage chart template sets")
app.add_typer(templates_cli, name="templates")


# ------------------------------------------------------------------------------
# wiring
# ------------------------------------------------------------------------------
def _load(config: str) -> ControllerConfig:
    try:
        return load_config(config)
    except ConfigError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)


def make_store(cfg: ControllerConfig) -> ObjectStore:
    if cfg.store == "kubernetes":
        return KubeStore(cfg.namespace, kube_context=cfg.context)
    return MemoryStore(load_manifests(cfg.manifests))


def make_reconciler(cfg: ControllerConfig, store: ObjectStore, observers: List) -> AppReconciler:
    helm = HelmCliRunner(
        kube_context=cfg.helm.kube_context or cfg.context,
        timeout_seconds=cfg.helm.timeout_seconds,
        debug=cfg.helm.debug,
    )
    return AppReconciler(
        store,
        PoolRegistry(store),
        Storage(store, cfg.namespace),
        helm,
        observers=observers,
    )


def _observers(cfg: ControllerConfig, logger) -> List:
    observers: List = [LoggerObserver(logger)]
    if cfg.events_file:
        observers.append(JsonFileObserver(cfg.events_file))
    return observers


# ------------------------------------------------------------------------------
# commands
# ------------------------------------------------------------------------------
@app.command()
def run(
    config: str = typer.Argument(..., help="Controller config YAML"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Verbose console logging"),
):
    """Run the controller until interrupted."""
    logger, run_id, log_path = init_logging(verbose=debug)
    cfg = _load(config)

    typer.secho("Shipyard controller", bold=True)
    typer.echo(f"  Run ID   : {run_id}")
    typer.echo(f"  Logs     : {log_path}")
    typer.echo(f"  Store    : {cfg.store}")

    store = make_store(cfg)
    ensure_default_templates(Storage(store, cfg.namespace))
    controller = Controller(
        make_reconciler(cfg, store, _observers(cfg, logger)),
        store,
        workers=cfg.workers,
        resync_seconds=cfg.resync_seconds,
    )

    stop = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: stop.set())
    signal.signal(signal.SIGTERM, lambda *_: stop.set())
    controller.run(stop)


@app.command()
def reconcile(
    config: str = typer.Argument(..., help="Controller config YAML"),
    name: str = typer.Argument(..., help="App name"),
    debug: bool = typer.Option(False, "--debug", "-d"),
):
    """Run a single reconciliation pass for one app and print the outcome."""
    logger, _, _ = init_logging(verbose=debug)
    cfg = _load(config)
    store = make_store(cfg)
    ensure_default_templates(Storage(store, cfg.namespace))

    outcome = make_reconciler(cfg, store, _observers(cfg, logger)).reconcile(name)
    if outcome is None:
        typer.echo(f"app {name}: nothing to do")
        return
    typer.echo(f"app {name}: {outcome.phase.value}")
    if outcome.message:
        typer.echo(f"  {outcome.message}")


@templates_cli.command("export")
def export_templates(
    config: str = typer.Argument(..., help="Controller config YAML"),
    name: str = typer.Argument(..., help="Template set name"),
    directory: Path = typer.Argument(..., help="Target directory (its content is replaced)"),
):
    """Write a template set to a directory, one file per template."""
    cfg = _load(config)
    store = make_store(cfg)
    storage = Storage(store, cfg.namespace)
    ensure_default_templates(storage)
    try:
        templates = storage.get(name)
    except NotFoundError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    templates.export_to_directory(directory)
    typer.echo(f"exported {len(templates.yamls)} templates to {directory}")


@templates_cli.command("import")
def import_templates(
    config: str = typer.Argument(..., help="Controller config YAML"),
    name: str = typer.Argument(..., help="Template set name"),
    directory: Path = typer.Argument(..., exists=True, file_okay=False, help="Source directory"),
):
    """Create or replace a template set from the files in a directory."""
    cfg = _load(config)
    store = make_store(cfg)
    templates = read_directory(directory)
    Storage(store, cfg.namespace).update(name, templates)
    typer.echo(f"imported {len(templates.yamls)} templates into {name}")
    if cfg.store == "memory":
        typer.secho("note: memory store is not persisted", fg=typer.colors.YELLOW)


if __name__ == "__main__":
    app()
