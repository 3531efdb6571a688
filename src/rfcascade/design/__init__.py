"""RF cascade design package."""

# Import key classes for easier access
from rfcascade.design.rf_components import (
    RFComponent, ActiveComponent, PassiveComponent, AntennaComponent,
    PhasedArray, PropagationLoss, MergedComponent, component_from_dict
)
from rfcascade.design.rf_system_design import RFSystemDesign
from rfcascade.design.component_library import ComponentLibrary
from rfcascade.design.chain_reduction import (
    order_selection, common_frequencies, reduce_chain, merge_chain
)
from rfcascade.design.design_builder import build_design_from_config
