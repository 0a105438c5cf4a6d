from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional
import structlog

log = structlog.get_logger(__name__)

DEFAULT_ENGINE = "tectonic"
DEFAULT_EXTENSION = "tex"

class OutputFormat(Enum):
    # formats the convert command can produce.
    TEX = "tex"

    @classmethod
    def from_string(cls, s: Optional[str]) -> "OutputFormat":
        if not s:
            return cls.TEX
        try:
            return cls(s.lower())
        except ValueError:
            log.warning("invalid_output_format_string", input_string=s)
            return cls.TEX

DEFAULT_OUTPUT_FORMAT = OutputFormat.TEX

@dataclass
class ManusConfig:
    # holds all configuration parameters for a single run.
    input_path: str = "-"
    output_path: Optional[str] = None
    data_path: Optional[str] = None
    engine: str = DEFAULT_ENGINE
    keep_intermediates: bool = False
    synctex: bool = False
    strict: bool = True
    extension: str = DEFAULT_EXTENSION
    output_format: OutputFormat = DEFAULT_OUTPUT_FORMAT
    output_file: Optional[Path] = None
    verbose: bool = False
