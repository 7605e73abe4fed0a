"""Output directory and log sink setup shared by the command-line scripts."""

import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from .config import save_config


def setup_output_directory(
    output_dir: str,
    config: Optional[Dict[str, Any]] = None,
    config_filename: str = "config.yaml",
) -> Path:
    """Create the run directory and store the effective configuration in it.

    Args:
        output_dir: Run directory, created with its parents.
        config: Merged run configuration (YAML file plus CLI overrides).
        config_filename: Name of the stored configuration.

    Returns:
        Path of the run directory.
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    if config is not None:
        save_config(config, str(output_path / config_filename))
    return output_path


def setup_logging(
    output_dir: Path,
    log_subdir: str = "logs",
    log_prefix: str = "run",
    level: str = "INFO",
) -> Path:
    """Send loguru output to stderr and to a timestamped log file.

    Args:
        output_dir: Base output directory.
        log_subdir: Subdirectory for log files (default: "logs").
        log_prefix: Prefix for log filename (default: "run").
        level: Minimum level for both sinks (default: "INFO").

    Returns:
        Path of the log file.
    """
    log_dir = Path(output_dir) / log_subdir
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"{log_prefix}_{timestamp}.log"

    logger.remove()
    logger.add(sys.stderr, level=level)
    logger.add(log_file, level=level)

    return log_file


def record_run_inputs(
    output_dir: Path,
    title: str,
    inputs: Dict[str, Any],
    filename: str = "run_inputs.yaml",
) -> Path:
    """Log the sizes and sources a run works on and keep them next to its outputs.

    Args:
        output_dir: Run directory.
        title: Name of the run.
        inputs: Input files and sizes (observations, regions, scenarios, ...).
        filename: Name of the YAML record.

    Returns:
        Path of the YAML record.
    """
    logger.info(f"{title}: " + ", ".join(f"{key}={value}" for key, value in inputs.items()))
    path = Path(output_dir) / filename
    save_config({"title": title, **inputs}, str(path))
    return path
