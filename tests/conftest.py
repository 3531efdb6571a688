import pytest
import os
import sys

# Add the src directory to the path so we can import the package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from rfcascade.analysis.link_budget import LinkBudgetCalculator
from rfcascade.design.component_library import ComponentLibrary
from rfcascade.design.rf_components import ActiveComponent, AntennaComponent, PassiveComponent


def both_ways(tx, rx=None, freq="1.0"):
    """Serialized spec table for one frequency."""
    return {freq: {'TX': dict(tx), 'RX': dict(rx if rx is not None else tx)}}


# Define fixtures here that can be used across multiple test files
@pytest.fixture
def calculator():
    return LinkBudgetCalculator()


@pytest.fixture
def library():
    return ComponentLibrary()


@pytest.fixture
def make_active():
    """Factory for amplifiers/mixers declared at one frequency."""
    def _make(name="Amp", gain_db=0.0, nf_db=0.0, op1db_dbm=None, freq="1.0", component_id=None):
        raw = {'gain_db': gain_db, 'nf_db': nf_db}
        if op1db_dbm is not None:
            raw['op1db_dbm'] = op1db_dbm
        return ActiveComponent(component_id=component_id, name=name, specs_by_freq=both_ways(raw, freq=freq))
    return _make


@pytest.fixture
def make_passive():
    def _make(name="Filter", loss_db=0.0, freq="1.0", component_id=None):
        return PassiveComponent(component_id=component_id, name=name,
                                specs_by_freq=both_ways({'loss_db': loss_db}, freq=freq))
    return _make


@pytest.fixture
def make_antenna():
    def _make(name="Antenna", gain_db=0.0, nf_db=0.0, freq="1.0", component_id=None):
        return AntennaComponent(component_id=component_id, name=name,
                                specs_by_freq=both_ways({'gain_db': gain_db, 'nf_db': nf_db}, freq=freq))
    return _make


@pytest.fixture
def lna(make_active):
    return make_active("LNA", gain_db=15.0, nf_db=1.5, op1db_dbm=20.0)


@pytest.fixture
def mixer(make_active):
    return make_active("Mixer", gain_db=-7.0, nf_db=7.0, op1db_dbm=15.0)
