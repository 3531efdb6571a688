import yaml
import os
from typing import Dict, Any
from .logger import get_logger

logger = get_logger(__name__)

def load_config(config_path: str) -> Dict[str, Any]:
    """
    Loads a design or calculation configuration from a YAML file.

    JSON documents are valid YAML, so exported component files load too.

    Args:
        config_path: The absolute or relative path to the configuration file.

    Returns:
        A dictionary containing the configuration parameters.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        ValueError: If the top level of the document is not a mapping.
    """
    if not os.path.exists(config_path):
        error_msg = f"Configuration file not found: {config_path}"
        logger.error(error_msg)
        raise FileNotFoundError(error_msg)

    logger.info(f"Loading configuration from: {config_path}")
    try:
        with open(config_path, 'r', encoding='utf-8') as stream:
            config = yaml.safe_load(stream)
    except yaml.YAMLError as exc:
        logger.error(f"Error parsing YAML file {config_path}: {exc}")
        raise

    if config is None: # Handle empty file case
        logger.warning(f"Configuration file is empty: {config_path}")
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Configuration root must be a mapping, got {type(config).__name__}: {config_path}")
    logger.debug(f"Successfully loaded configuration: {config}")
    return config
