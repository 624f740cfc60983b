"""Configuration management for PhotoBridge."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from ruamel.yaml import YAML

from .sync.models import BackupIdentity
from .util.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config/photobridge/config.yaml"


class BackupDeviceConfig(BaseModel):
    """Identity of the device used as durable backup."""

    model: str = Field(default="Pixel_5", description="Device model as reported by adb")
    product: str = Field(default="redfin", description="Device product as reported by adb")


class TransferConfig(BaseModel):
    """Configuration for transfer operations."""

    photos_folder: str = Field(default="/sdcard/DCIM/Camera", description="Photo folder on origin devices")
    backup_folder: str = Field(default="/sdcard/DCIM/Camera", description="Photo folder on the backup device")
    documents_folder: str = Field(default="/sdcard/Documents", description="Push target for local files")
    storage_root: str = Field(default="/sdcard", description="Shared storage root listed for folder backups")
    file_timeout: float = Field(default=300.0, description="Timeout in seconds for a single file transfer")
    delete_timeout: float = Field(default=30.0, description="Timeout in seconds for a single remote deletion")
    listing_timeout: float = Field(default=60.0, description="Timeout in seconds for listing a device folder")


class PhotoBridgeConfig(BaseModel):
    """Main configuration for PhotoBridge."""

    local_root: Path = Field(
        default_factory=lambda: Path.home() / ".local/share/photobridge",
        description="Root directory for local copies"
    )

    backup_device: BackupDeviceConfig = Field(default_factory=BackupDeviceConfig)
    transfer: TransferConfig = Field(default_factory=TransferConfig)

    # Runtime settings
    adb_path: str = Field(default="adb", description="Path to ADB binary")
    scan_timeout: float = Field(default=15.0, description="Timeout in seconds for device scans")
    service_timeout: float = Field(default=15.0, description="Timeout in seconds for starting the ADB server")
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Optional detailed log file")

    model_config = ConfigDict(validate_assignment=True)


def load_config(config_path: Optional[Path] = None) -> PhotoBridgeConfig:
    """Load configuration from file or create default."""

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if config_path.exists():
        yaml = YAML(typ="safe")
        with open(config_path, "r") as f:
            data = yaml.load(f) or {}
        return PhotoBridgeConfig(**data)
    else:
        config = PhotoBridgeConfig()
        save_config(config, config_path)
        return config


def save_config(config: PhotoBridgeConfig, config_path: Optional[Path] = None) -> None:
    """Save configuration to file."""

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    config_path.parent.mkdir(parents=True, exist_ok=True)

    yaml = YAML()
    yaml.default_flow_style = False

    with open(config_path, "w") as f:
        yaml.dump(config.model_dump(mode="json"), f)

    logger.debug(f"Saved configuration to {config_path}")


class ConfigIdentityStore:
    """Backup identity persisted in the configuration file."""

    def __init__(self, config: PhotoBridgeConfig, config_path: Optional[Path] = None):
        self.config = config
        self.config_path = config_path

    def get_backup_identity(self) -> BackupIdentity:
        device = self.config.backup_device
        return BackupIdentity(model=device.model, product=device.product)

    def set_backup_identity(self, model: str, product: str) -> None:
        """Store a new backup identity and save it immediately."""
        model = model.strip()
        product = product.strip()
        if not model or not product:
            raise ValueError("Backup device model and product must not be empty")

        self.config.backup_device = BackupDeviceConfig(model=model, product=product)
        save_config(self.config, self.config_path)
        logger.info(f"Backup device set to {model} ({product})")
