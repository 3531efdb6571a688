"""RF component library with parameterized models."""

import copy
from typing import Dict, List, Optional, Any, Type

from rfcascade.core.constants import DEFAULT_FREQUENCY
from rfcascade.design.rf_components import (
    RFComponent, ActiveComponent, PassiveComponent, AntennaComponent,
    PhasedArray, PropagationLoss
)
from rfcascade.utils.logger import get_logger

logger = get_logger(__name__)


def _same_both_ways(raw: Dict[str, float]) -> Dict[str, Dict[str, Dict[str, float]]]:
    """Spec table with one default frequency and identical TX/RX inputs."""
    return {DEFAULT_FREQUENCY: {'TX': dict(raw), 'RX': dict(raw)}}


class ComponentLibrary:
    """Library of parameterized RF component models."""

    def __init__(self):
        """Initialize the component library."""
        self.component_templates: Dict[str, Dict[str, Any]] = {}
        self._register_default_templates()

    def _register_default_templates(self):
        """Register default component templates."""
        # Active stages
        self.register_template(
            "lna",
            component_class=ActiveComponent,
            name="LNA",
            parameters={"specs_by_freq": _same_both_ways({'gain_db': 15.0, 'nf_db': 1.5, 'op1db_dbm': 20.0})},
            description="Low Noise Amplifier"
        )
        self.register_template(
            "pa",
            component_class=ActiveComponent,
            name="PA",
            parameters={"specs_by_freq": _same_both_ways({'gain_db': 20.0, 'nf_db': 5.0, 'op1db_dbm': 33.0})},
            description="Power Amplifier"
        )
        self.register_template(
            "mixer",
            component_class=ActiveComponent,
            name="Mixer",
            parameters={"specs_by_freq": _same_both_ways({'gain_db': -7.0, 'nf_db': 7.0, 'op1db_dbm': 15.0})},
            description="Mixer (conversion loss modelled as negative gain)"
        )

        # Passive stages
        for template_id, name, loss_db, description in (
            ("filter", "Filter", 1.5, "Band-pass filter"),
            ("attenuator", "Atten", 6.0, "Fixed attenuator"),
            ("divider_2", "1-2 Div", 3.5, "1:2 power divider"),
            ("divider_4", "1-4 Div", 7.0, "1:4 power divider"),
            ("trace", "Trace", 0.5, "PCB trace / cable"),
        ):
            self.register_template(
                template_id,
                component_class=PassiveComponent,
                name=name,
                parameters={"specs_by_freq": _same_both_ways({'loss_db': loss_db})},
                description=description
            )

        # Antennas
        self.register_template(
            "antenna",
            component_class=AntennaComponent,
            name="Antenna",
            parameters={"specs_by_freq": _same_both_ways({'gain_db': 12.0, 'nf_db': 0.0})},
            description="Single antenna"
        )
        self.register_template(
            "array",
            component_class=PhasedArray,
            name="Array (N=16)",
            parameters={"rows": 4, "cols": 4},
            description="4x4 phased array, gain from element count"
        )

        # Propagation
        self.register_template(
            "air_loss",
            component_class=PropagationLoss,
            name="Air Loss",
            parameters={"distance_cm": 100.0, "mode": "calc"},
            description="Free-space path segment, loss from distance and frequency"
        )

    def register_template(self,
                         template_id: str,
                         component_class: Type[RFComponent],
                         parameters: Dict[str, Any],
                         name: Optional[str] = None,
                         description: str = ""):
        """
        Register a component template.

        Args:
            template_id: Unique identifier for the template
            component_class: RFComponent class to instantiate
            parameters: Default constructor arguments for the component
            name: Default component name
            description: Human-readable description
        """
        if template_id in self.component_templates:
            logger.warning(f"Overwriting existing template: {template_id}")

        self.component_templates[template_id] = {
            "component_class": component_class,
            "parameters": parameters,
            "name": name,
            "description": description
        }
        logger.debug(f"Registered component template: {template_id}")

    def create_component(self,
                        template_id: str,
                        component_id: Optional[str] = None,
                        name: Optional[str] = None,
                        **parameter_overrides) -> Optional[RFComponent]:
        """
        Create a component from a template with optional parameter overrides.

        Args:
            template_id: ID of the template to use
            component_id: Optional ID for the new component
            name: Optional name for the new component
            **parameter_overrides: Constructor arguments to override from the template

        Returns:
            Instantiated RFComponent or None if template not found

        Raises:
            ValueError: If an override is not accepted by the component class.
        """
        if template_id not in self.component_templates:
            logger.error(f"Template not found: {template_id}")
            return None

        template = self.component_templates[template_id]
        component_class = template["component_class"]

        if name is None:
            name = template["name"] or f"{template_id.replace('_', ' ').title()}"

        kwargs = copy.deepcopy(template["parameters"])
        kwargs.update(parameter_overrides)
        try:
            component = component_class(component_id=component_id, name=name, **kwargs)
        except TypeError as exc:
            raise ValueError(f"Invalid parameters for template {template_id}: {exc}")

        logger.debug(f"Created component from template {template_id}: {component.name} (ID: {component.id})")
        return component

    def list_templates(self) -> List[Dict[str, Any]]:
        """
        List all available templates.

        Returns:
            List of template information dictionaries
        """
        return [
            {
                "id": template_id,
                "class": template["component_class"].__name__,
                "description": template["description"]
            }
            for template_id, template in self.component_templates.items()
        ]
