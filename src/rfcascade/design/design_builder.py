"""Build an RFSystemDesign from a YAML/JSON design description."""

from typing import Any, Dict, Mapping, Optional, Union

from rfcascade.design.component_library import ComponentLibrary
from rfcascade.design.rf_components import RFComponent, component_from_dict
from rfcascade.design.rf_system_design import RFSystemDesign
from rfcascade.utils.config_loader import load_config
from rfcascade.utils.logger import get_logger

logger = get_logger(__name__)


def _build_component(comp_conf: Mapping[str, Any], library: ComponentLibrary) -> RFComponent:
    template_id = comp_conf.get('template')
    if template_id is None:
        return component_from_dict(comp_conf)

    component = library.create_component(
        template_id,
        component_id=comp_conf.get('id'),
        name=comp_conf.get('name'),
        **(comp_conf.get('parameters') or {})
    )
    if component is None:
        raise ValueError(f"Unknown component template '{template_id}' for component {comp_conf.get('id')}")
    return component


def build_design_from_config(config: Union[str, Mapping[str, Any]],
                             library: Optional[ComponentLibrary] = None) -> RFSystemDesign:
    """
    Builds an RFSystemDesign from a design configuration.

    Args:
        config: Path to a design YAML/JSON file, or the already loaded mapping.
        library: Component library used for ``template`` entries.

    Returns:
        A design with every component added and every connection made.
        Each connection entry is a list of two or more component ids linked
        in order, so ``[a, b, c]`` makes a -> b and b -> c.

    Raises:
        ValueError: If the configuration has invalid data, an unknown
            template, or a connection to an unknown component.
    """
    if isinstance(config, str):
        config = load_config(config)
    library = library or ComponentLibrary()

    design = RFSystemDesign(design_id=config.get('id'), name=config.get('name', 'Unnamed Design'))

    for comp_conf in config.get('components', []):
        if comp_conf.get('id') is None or comp_conf.get('id') == '':
            logger.warning("Skipping component config with missing 'id'")
            continue
        # YAML reads bare numbers as int; connections refer to ids as strings
        comp_conf = {**comp_conf, 'id': str(comp_conf['id'])}
        component = _build_component(comp_conf, library)
        design.add_component(component)
        logger.debug(f"  Added component '{component.name}' ({component.id})")

    connections: Dict[str, Any] = config.get('connections') or {}
    for direction_key, paths in connections.items():
        for path in paths or []:
            if len(path) < 2:
                raise ValueError(f"Connection {path} in {direction_key} needs at least two component ids")
            for from_id, to_id in zip(path, path[1:]):
                design.connect(str(from_id), str(to_id), direction_key)

    logger.info(f"Built design '{design.name}' with {len(design.components)} components")
    return design
