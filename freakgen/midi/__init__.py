"""
MIDI module - CC dispatch planning and output to the MicroFreak.
"""

from .cc_map import CC_MAP, CCMessage, DispatchPlan, build_dispatch, program_change
from .output import VIRTUAL_PORT, MidiOutput, find_preferred_port, list_output_ports

__all__ = [
    "CC_MAP",
    "CCMessage",
    "DispatchPlan",
    "build_dispatch",
    "program_change",
    "MidiOutput",
    "VIRTUAL_PORT",
    "find_preferred_port",
    "list_output_ports",
]
