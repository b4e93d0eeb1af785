"""
MIDI output to the MicroFreak over mido.

Sends the CC messages of a DispatchPlan and bank/program selects on one
channel. The virtual port stands in for a synth when none is connected:
everything is logged and nothing is sent.
"""

from typing import List, Optional

import mido

from ..errors import MidiError
from ..utils.logger import logger
from .cc_map import BANK_SELECT_LSB, BANK_SELECT_MSB, DispatchPlan, clamp_cc, program_change

VIRTUAL_PORT = "Virtual MicroFreak (Debug)"
PREFERRED_PORTS = ["MicroFreak", "Arturia"]


def list_output_ports() -> List[str]:
    try:
        return list(mido.get_output_names())
    except (OSError, ImportError) as e:
        raise MidiError(f"MIDI backend unavailable: {e}")


def find_preferred_port(preferred_substrings: Optional[List[str]] = None) -> Optional[str]:
    """
    Find MIDI output port matching preferred substrings.

    Args:
        preferred_substrings: Priority list (default: ["MicroFreak", "Arturia"])

    Returns:
        First matching port name, else the first port, else None
    """
    if preferred_substrings is None:
        preferred_substrings = PREFERRED_PORTS

    outputs = list_output_ports()

    for substring in preferred_substrings:
        matches = [p for p in outputs if substring.lower() in p.lower()]
        if matches:
            logger.info(f"Found port matching '{substring}': {matches[0]}", component="MIDI")
            return matches[0]

    if outputs:
        logger.warning(f"No MicroFreak port found, using {outputs[0]}", component="MIDI",
                       details=f"Available: {outputs}")
        return outputs[0]

    logger.warning("No MIDI output ports found", component="MIDI")
    return None


class MidiOutput:
    """
    MIDI CC / program change sender.

    Usage:
        with MidiOutput(find_preferred_port()) as out:
            sent = out.push(build_dispatch(patch))
    """

    DEFAULT_CHANNEL = 0  # mido uses 0-indexed channels

    def __init__(self, port_name: Optional[str], channel: int = DEFAULT_CHANNEL):
        if not port_name:
            raise MidiError("No MIDI output selected")
        if not 0 <= channel <= 15:
            raise MidiError(f"MIDI channel out of range: {channel}")
        self.port_name = port_name
        self.channel = channel
        self.port = None
        self._is_open = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def is_virtual(self) -> bool:
        return self.port_name == VIRTUAL_PORT

    def open(self):
        """Open MIDI port."""
        if self._is_open:
            return

        if self.is_virtual:
            self._is_open = True
            logger.info(f"Opened {self.port_name}", component="MIDI")
            return

        try:
            self.port = mido.open_output(self.port_name)
        except (OSError, ImportError) as e:
            logger.error(f"Failed to open {self.port_name}", component="MIDI", details=str(e))
            raise MidiError(f"Failed to open MIDI port {self.port_name}: {e}")
        self._is_open = True
        logger.info(f"Opened {self.port_name}", component="MIDI")

    def close(self):
        """Close MIDI port."""
        if self.port:
            self.port.close()
            self.port = None
        self._is_open = False

    def __enter__(self) -> "MidiOutput":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def _send(self, msg: "mido.Message"):
        if not self._is_open:
            raise MidiError("MIDI port not open")
        if self.is_virtual:
            logger.info(f"[Virtual MIDI] {msg}", component="MIDI")
            return
        self.port.send(msg)

    def send_cc(self, control: int, value) -> int:
        """
        Send one control change.

        Returns:
            Actual CC value sent (clamped)
        """
        val = clamp_cc(value)
        self._send(mido.Message('control_change', channel=self.channel,
                                control=control, value=val))
        return val

    def send_program_change(self, preset_number: int):
        """Select a stored preset: bank select MSB/LSB then program change."""
        bank, program = program_change(preset_number)
        self.send_cc(BANK_SELECT_MSB, bank)
        self.send_cc(BANK_SELECT_LSB, 0)
        self._send(mido.Message('program_change', channel=self.channel, program=program))
        logger.midi(f"Bank {bank}, program {program}", details=f"preset {preset_number}")
        return bank, program

    def push(self, plan: DispatchPlan) -> int:
        """Send every CC in the plan. Returns the number sent."""
        for message in plan.messages:
            self.send_cc(message.control, message.value)
            logger.midi(str(message))
        logger.info(f"Sent {len(plan.messages)} params via MIDI", component="MIDI")
        return len(plan.messages)
