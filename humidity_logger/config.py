"""
Configuration management for the humidity logger.

This module defines a dataclass ``Config`` that holds configuration for the
logger service. It can be loaded from a YAML file or constructed manually.
The configuration covers file locations (database, export trigger, export
output, log file), the I2C bus and device address of the sensor, and the
sensor backend selection.

Retention window and cycle period are fixed constants of the logger loop and
are not part of the configuration.

Example YAML configuration (config/pi.yaml):

```yaml
db_path: "./data/Humidity.db"
request_path: "./export_request.txt"
export_path: "./export_custom.csv"
i2c_bus: "/dev/i2c-1"       # a bus number such as 1 also works
i2c_address: 0x44
sensor_backend: "hs3003"    # "mock" on development machines
log_file: "./data/humidity.log"
log_level: "INFO"
```

Using the ``Config.from_yaml`` method simplifies loading configuration:

```python
from humidity_logger.config import Config
config = Config.from_yaml('config/pi.yaml')
```
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Optional, Union
import yaml

SENSOR_BACKENDS = ('hs3003', 'mock')


def _bus_id(value: Union[int, str]) -> Union[int, str]:
    """Accept either a bus number ("1", 1) or a device path ("/dev/i2c-1")."""
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return value


@dataclass
class Config:
    """Configuration settings for the humidity logger."""

    db_path: str = 'Humidity.db'
    request_path: str = 'export_request.txt'
    export_path: str = 'export_custom.csv'
    i2c_bus: Union[int, str] = '/dev/i2c-1'
    i2c_address: int = 0x44
    sensor_backend: str = 'hs3003'
    log_file: Optional[str] = None
    log_level: str = 'INFO'

    def __post_init__(self) -> None:
        self.sensor_backend = self.sensor_backend.lower()
        if self.sensor_backend not in SENSOR_BACKENDS:
            raise ValueError(f'Unknown sensor backend: {self.sensor_backend}')

    @classmethod
    def from_yaml(cls, path: str) -> 'Config':
        """Load configuration from a YAML file.

        Keys that are absent fall back to the dataclass defaults. Keys that
        are not configuration fields are rejected so that a misspelt setting
        does not silently fall back to its default.

        Raises:
            FileNotFoundError: if the YAML file cannot be found.
            yaml.YAMLError: if the YAML file is invalid.
            ValueError: if the document is not a mapping or a value is invalid.
        """
        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f'Configuration file {path} must contain a mapping')

        unknown = sorted(str(k) for k in set(data) - {f.name for f in fields(cls)})
        if unknown:
            raise ValueError(f'Unknown configuration keys in {path}: {unknown}')

        defaults = cls()
        return cls(
            db_path=data.get('db_path', defaults.db_path),
            request_path=data.get('request_path', defaults.request_path),
            export_path=data.get('export_path', defaults.export_path),
            i2c_bus=_bus_id(data.get('i2c_bus', defaults.i2c_bus)),
            i2c_address=int(data.get('i2c_address', defaults.i2c_address)),
            sensor_backend=str(data.get('sensor_backend', defaults.sensor_backend)),
            log_file=data.get('log_file', defaults.log_file),
            log_level=str(data.get('log_level', defaults.log_level)).upper(),
        )

    def ensure_paths(self) -> None:
        """Ensure that parent directories exist for the DB, export and log files.

        This method is idempotent.
        """
        paths = [self.db_path, self.request_path, self.export_path]
        if self.log_file:
            paths.append(self.log_file)
        for path in paths:
            directory = os.path.dirname(path)
            if directory and not os.path.exists(directory):
                os.makedirs(directory, exist_ok=True)
