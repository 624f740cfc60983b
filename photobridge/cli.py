"""Command Line Interface for PhotoBridge."""

import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

import click
from rich.console import Console
from rich.table import Table

from .config import DEFAULT_CONFIG_PATH, load_config
from .sync import (
    DeviceIdentity,
    DeviceRole,
    PhotoBridgeError,
    TransferResult,
    create_transfer_progress_bar,
)
from .sync.context import PhotoBridgeContext
from .util import format_duration, setup_logging

console = Console()


def setup_cli_logging(level: str, verbose: bool = False, log_file: Optional[Path] = None):
    """Setup logging for CLI."""
    setup_logging(level="DEBUG" if verbose else level, log_file=log_file)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--config", "-c", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              help="Configuration file path")
@click.pass_context
def cli(ctx, verbose: bool, config_path: Optional[Path]):
    """PhotoBridge - photo backup between Android devices over ADB."""
    config_path = config_path or DEFAULT_CONFIG_PATH
    config = load_config(config_path)
    setup_cli_logging(config.log_level, verbose, config.log_file)

    ctx.ensure_object(dict)
    ctx.obj["context"] = PhotoBridgeContext.from_config(config, config_path)


def _ready_context(ctx) -> PhotoBridgeContext:
    """Bootstrap ADB and scan devices, exiting on fatal failures."""
    context: PhotoBridgeContext = ctx.obj["context"]

    try:
        scan = context.initialize()
    except PhotoBridgeError as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("Please ensure Android Debug Bridge (ADB) is installed and accessible.")
        sys.exit(1)

    if not scan.ok:
        console.print(f"[yellow]Device scan failed ({scan.error.value}): {scan.message}[/yellow]")

    return context


def _list_devices(context: PhotoBridgeContext):
    """Helper to display device list."""
    identity = context.backup_identity
    classified = context.classified()

    if classified.backup is not None:
        console.print(f"[green]Backup device: {identity.display_name} [CONNECTED][/green]")
    else:
        console.print(f"[yellow]Backup device: {identity.display_name} [NOT CONNECTED][/yellow]")

    devices = context.registry.devices
    if not devices:
        console.print("[yellow]No devices found[/yellow]")
        return

    table = Table(title="Connected Devices")
    table.add_column("Serial", style="cyan")
    table.add_column("Model", style="white")
    table.add_column("Product", style="white")
    table.add_column("State", style="green")
    table.add_column("Role", style="magenta")

    for device in devices:
        role = classified.role_of(device)
        table.add_row(
            device.serial,
            device.model or "Unknown",
            device.product or "Unknown",
            device.state,
            "" if role is DeviceRole.UNCLASSIFIED else role.value,
        )

    console.print(table)


def _select_device(context: PhotoBridgeContext, serial: Optional[str],
                   candidates: Sequence[DeviceIdentity]) -> str:
    """Resolve the serial to operate on, exiting if it is ambiguous."""
    if serial:
        return serial

    if not candidates:
        console.print("[red]No devices found[/red]")
        sys.exit(1)

    if len(candidates) > 1:
        console.print("[yellow]Multiple devices found. Please specify --serial[/yellow]")
        _list_devices(context)
        sys.exit(1)

    return candidates[0].serial


@contextmanager
def _progress(desc: str) -> Iterator:
    """Yield a transfer progress callback drawing a tqdm bar."""
    bar = create_transfer_progress_bar(0, desc=desc)

    def update(current: int, total: int, path: str) -> None:
        if bar.total != total:
            bar.reset(total=total)
        bar.n = current
        bar.set_postfix_str(path, refresh=False)
        bar.refresh()

    try:
        yield update
    finally:
        bar.close()


def _show_result(title: str, result: TransferResult, started: float):
    """Render a transfer summary table."""
    table = Table(title=title)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")

    if result.to_be_pulled_count or not result.to_be_pushed_count:
        table.add_row("Files to pull", str(result.to_be_pulled_count))
        table.add_row("Files pulled", str(result.pulled_count))
    if result.to_be_pushed_count:
        table.add_row("Files to push", str(result.to_be_pushed_count))
        table.add_row("Files pushed", str(result.pushed_count))
    table.add_row("Sync", "Completed" if result.all_files_synced else "Partial")
    if result.delete_completed is not None:
        table.add_row("Deleted", str(result.deleted_count))
        table.add_row("Deletion", "Completed" if result.delete_completed else "Failed")
    table.add_row("Local folder", result.folder_path or "N/A")
    table.add_row("Duration", format_duration(time.monotonic() - started))

    console.print(table)

    if result.all_files_synced:
        console.print("[bold green]Transfer completed successfully![/bold green]")
    else:
        console.print("[yellow]Transfer completed with some errors.[/yellow]")
        sys.exit(1)


@cli.group()
def devices():
    """Device management commands."""
    pass


@devices.command("list")
@click.pass_context
def devices_list(ctx):
    """List connected devices and the backup device status."""
    _list_devices(_ready_context(ctx))


@devices.command("set-backup")
@click.argument("model")
@click.argument("product")
@click.pass_context
def devices_set_backup(ctx, model: str, product: str):
    """Set the backup device by MODEL and PRODUCT (e.g. Pixel_5 redfin)."""
    context = _ready_context(ctx)

    try:
        context.set_backup_identity(model, product)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    console.print(f"[green]Backup device set: {context.backup_identity.display_name}[/green]")
    _list_devices(context)


@devices.command("connect")
@click.argument("host")
@click.argument("port", type=int)
@click.pass_context
def devices_connect(ctx, host: str, port: int):
    """Connect a device over wireless debugging."""
    context = _ready_context(ctx)

    try:
        console.print(context.connect_wireless(host, port))
    except PhotoBridgeError as e:
        console.print(f"[red]ADB Error: {e}[/red]")
        sys.exit(1)

    context.rescan()
    _list_devices(context)


@devices.command("pair")
@click.argument("host")
@click.argument("port", type=int)
@click.argument("code")
@click.pass_context
def devices_pair(ctx, host: str, port: int, code: str):
    """Pair a device using its wireless debugging pairing CODE."""
    context = _ready_context(ctx)

    try:
        console.print(context.pair_wireless(host, port, code))
    except PhotoBridgeError as e:
        console.print(f"[red]ADB Error: {e}[/red]")
        sys.exit(1)


@devices.command("folders")
@click.option("--serial", "-s", help="Device serial number")
@click.pass_context
def devices_folders(ctx, serial: Optional[str]):
    """List top-level folders of a device's shared storage."""
    context = _ready_context(ctx)
    serial = _select_device(context, serial, [d for d in context.registry.devices if d.is_connected])

    try:
        folders = context.list_root_folders(serial)
    except PhotoBridgeError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if not folders:
        console.print("[yellow]No folders found on the device[/yellow]")
        return

    for folder in folders:
        console.print(folder)


@cli.group()
def backup():
    """Backup commands."""
    pass


@backup.command("folder")
@click.argument("folder")
@click.option("--serial", "-s", help="Device serial number")
@click.option("--delete", "delete_after", is_flag=True, help="Delete device copies once pulled")
@click.pass_context
def backup_folder(ctx, folder: str, serial: Optional[str], delete_after: bool):
    """Back up a device FOLDER to the local machine."""
    context = _ready_context(ctx)
    serial = _select_device(context, serial, [d for d in context.registry.devices if d.is_connected])

    started = time.monotonic()
    try:
        with _progress(f"Backing up {folder}") as progress:
            result = context.backup_folder(serial, folder, delete_after=delete_after, progress_callback=progress)
    except PhotoBridgeError as e:
        console.print(f"[red]Backup failed: {e}[/red]")
        sys.exit(1)

    if result.to_be_pulled_count == 0:
        console.print("[yellow]Nothing new to back up[/yellow]")

    _show_result("Backup Result", result, started)


@backup.command("photos")
@click.option("--origin", "-o", "origin_serial", help="Origin device serial number")
@click.option("--delete", "delete_from_origin", is_flag=True,
              help="Delete photos from the origin device after backup")
@click.pass_context
def backup_photos(ctx, origin_serial: Optional[str], delete_from_origin: bool):
    """Transfer photos from an origin device to the backup device."""
    context = _ready_context(ctx)
    classified = context.classified()

    if classified.backup is None:
        console.print("[red]The backup device is not connected[/red]")
        console.print(f"Expected device: {context.backup_identity.display_name}")
        sys.exit(1)

    origin_serial = _select_device(context, origin_serial, classified.origins)

    started = time.monotonic()
    try:
        with _progress("Transferring photos") as progress:
            result = context.transfer_photos(
                origin_serial,
                delete_from_origin=delete_from_origin,
                progress_callback=progress,
            )
    except (PhotoBridgeError, ValueError) as e:
        console.print(f"[red]Transfer failed: {e}[/red]")
        sys.exit(1)

    _show_result("Transfer Summary", result, started)


@cli.command("push")
@click.argument("files", nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--serial", "-s", help="Device serial number")
@click.pass_context
def push(ctx, files: List[Path], serial: Optional[str]):
    """Push local FILES into the device documents folder."""
    context = _ready_context(ctx)
    serial = _select_device(context, serial, [d for d in context.registry.devices if d.is_connected])

    started = time.monotonic()
    try:
        with _progress("Pushing files") as progress:
            result = context.push_to_documents(serial, list(files), progress_callback=progress)
    except (PhotoBridgeError, ValueError) as e:
        console.print(f"[red]Push failed: {e}[/red]")
        sys.exit(1)

    _show_result("Push Result", result, started)


@cli.group()
def server():
    """ADB server commands."""
    pass


@server.command("kill")
@click.pass_context
def server_kill(ctx):
    """Stop the ADB server."""
    context: PhotoBridgeContext = ctx.obj["context"]

    try:
        context.shutdown()
    except PhotoBridgeError as e:
        console.print(f"[red]ADB Error: {e}[/red]")
        sys.exit(1)

    console.print("ADB server stopped")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
