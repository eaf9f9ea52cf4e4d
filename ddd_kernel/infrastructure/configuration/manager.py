"""
JSON configuration manager with validation and hot-reload support.
"""

import json
import threading
import time
from pathlib import Path
from typing import Dict, Any, Optional, Callable, List

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from ddd_kernel.domain.exceptions import ConfigurationError
from ddd_kernel.domain.interfaces.base import ILogger
from ddd_kernel.domain.models.configuration import KernelConfiguration


class ConfigurationFileHandler(FileSystemEventHandler):
    """Reloads the configuration when its file changes on disk."""

    def __init__(self, config_manager: 'ConfigurationManager', debounce_seconds: float = 1.0):
        self.config_manager = config_manager
        self.last_modified = 0.0
        self.debounce_seconds = debounce_seconds

    def on_modified(self, event):
        if event.is_directory:
            return

        if Path(event.src_path).resolve() != self.config_manager.config_file_path.resolve():
            return

        current_time = time.monotonic()
        if current_time - self.last_modified < self.debounce_seconds:
            return
        self.last_modified = current_time

        self.config_manager.reload()


class ConfigurationManager:
    """Kernel configuration backed by a JSON file, with optional hot reload."""

    def __init__(self, config_file_path: str, logger: ILogger):
        self.config_file_path = Path(config_file_path)
        self.logger = logger
        self._config_data: Dict[str, Any] = {}
        self._kernel_config: Optional[KernelConfiguration] = None
        self._observers: List[Observer] = []
        self._change_callbacks: List[Callable[[KernelConfiguration], None]] = []
        self._lock = threading.RLock()

        self._load_configuration()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._config_data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a value. The typed configuration is only rebuilt if the result is valid."""
        with self._lock:
            self._config_data[key] = value
            try:
                self._kernel_config = KernelConfiguration.from_dict(self._config_data)
            except (TypeError, ValueError) as e:
                self.logger.warning(f"Configuration value rejected: {e}", key=key)

    def get_all(self) -> Dict[str, Any]:
        with self._lock:
            return self._config_data.copy()

    def validate(self) -> bool:
        """Validate current configuration data."""
        try:
            with self._lock:
                KernelConfiguration.from_dict(self._config_data)
            return True
        except (TypeError, ValueError) as e:
            self.logger.error(f"Configuration validation failed: {e}")
            return False

    def reload(self) -> bool:
        """Reload configuration from file. Returns False and keeps the old values on failure."""
        return self._reload_from_file()

    def get_kernel_config(self) -> KernelConfiguration:
        with self._lock:
            if self._kernel_config is None:
                self._rebuild_config()
            return self._kernel_config

    def start_hot_reload(self) -> None:
        """Start watching the configuration file for changes."""
        if not self.config_file_path.exists():
            self.logger.warning(f"Configuration file {self.config_file_path} does not exist")
            return

        observer = Observer()
        observer.schedule(
            ConfigurationFileHandler(self),
            str(self.config_file_path.parent),
            recursive=False
        )
        observer.start()
        self._observers.append(observer)

        self.logger.info(f"Started hot-reload for configuration file: {self.config_file_path}")

    def stop_hot_reload(self) -> None:
        for observer in self._observers:
            observer.stop()
            observer.join()
        if self._observers:
            self.logger.info("Stopped configuration hot-reload")
        self._observers.clear()

    def add_change_callback(self, callback: Callable[[KernelConfiguration], None]) -> None:
        """Register a callback run with the new configuration after each reload."""
        self._change_callbacks.append(callback)

    def _load_configuration(self) -> None:
        if self.config_file_path.exists():
            if not self._reload_from_file():
                raise ConfigurationError(
                    "Invalid configuration file", context={'path': str(self.config_file_path)}
                )
        else:
            self.logger.info(f"Configuration file {self.config_file_path} not found, using defaults")
            self._config_data = KernelConfiguration().to_dict()
            self._rebuild_config()
            self._save_configuration()

    def _reload_from_file(self) -> bool:
        try:
            with self._lock:
                with open(self.config_file_path, 'r', encoding='utf-8') as f:
                    new_config = json.load(f)

                kernel_config = KernelConfiguration.from_dict(new_config)
                self._config_data = new_config
                self._kernel_config = kernel_config

                self.logger.info(f"Configuration reloaded from {self.config_file_path}")
        except json.JSONDecodeError as e:
            self.logger.error(f"Invalid JSON in configuration file: {e}")
            return False
        except (OSError, TypeError, ValueError) as e:
            self.logger.error(f"Failed to reload configuration: {e}")
            return False

        for callback in self._change_callbacks:
            try:
                callback(kernel_config)
            except Exception as e:
                self.logger.error(f"Configuration change callback failed: {e}")

        return True

    def _rebuild_config(self) -> None:
        try:
            self._kernel_config = KernelConfiguration.from_dict(self._config_data)
        except (TypeError, ValueError) as e:
            self.logger.error(f"Failed to rebuild configuration: {e}")
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def _save_configuration(self) -> None:
        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.config_file_path, 'w', encoding='utf-8') as f:
                json.dump(self._config_data, f, indent=4)

            self.logger.info(f"Configuration saved to {self.config_file_path}")
        except OSError as e:
            self.logger.error(f"Failed to save configuration: {e}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop_hot_reload()
