import asyncio
from collections.abc import Iterable
from enum import Enum

from mfg_attachments.errors import GateBusyError
from mfg_attachments.schemas.attachment import Attachment
from mfg_attachments.schemas.upload import MetadataDecision, PendingUploadItem
from mfg_attachments.stations import StationConfig


class GateState(str, Enum):
    IDLE = "idle"
    AWAITING_INPUT = "awaiting_input"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class MetadataGate:
    """Holds staged files until the operator supplies the station identifier.

    ``request_metadata`` suspends the caller until ``confirm`` succeeds or
    ``cancel`` is called. The hosting view drives those two methods; the
    field it renders is labelled from the station, not from the files.
    """

    def __init__(self, station: StationConfig):
        self.station = station
        self.state = GateState.IDLE
        self.pending: tuple[PendingUploadItem, ...] = ()
        self.replacement_target: Attachment | None = None
        self.identifier = ""
        self.description = ""
        self.error: str | None = None
        self._decision: asyncio.Future | None = None
        self._prompt_open = asyncio.Event()

    @property
    def label(self) -> str:
        return self.station.identifier.label

    @property
    def placeholder(self) -> str:
        return self.station.identifier.placeholder

    async def request_metadata(
        self,
        items: Iterable[PendingUploadItem],
        replacement_target: Attachment | None = None,
    ) -> MetadataDecision | None:
        """Wait for the identifier; returns None when the operator cancels."""
        if self.state is GateState.AWAITING_INPUT:
            raise GateBusyError(f"{self.label} is already being requested")
        items = tuple(items)
        if not items:
            raise ValueError("No files staged for upload")

        self.pending = items
        self.replacement_target = replacement_target
        self.identifier = (replacement_target.cam_number or "") if replacement_target else ""
        self.description = ""
        self.error = None
        decision = self._decision = asyncio.get_running_loop().create_future()
        self.state = GateState.AWAITING_INPUT
        self._prompt_open.set()
        try:
            return await decision
        finally:
            if self._decision is decision:
                # The waiting caller was cancelled before the operator answered.
                if self.state is GateState.AWAITING_INPUT:
                    self._close(GateState.CANCELLED)
                self._decision = None

    async def wait_for_prompt(self) -> None:
        await self._prompt_open.wait()

    def set_identifier(self, value: str) -> None:
        self.identifier = value

    def confirm(self, identifier: str | None = None, description: str | None = None) -> bool:
        if self.state is not GateState.AWAITING_INPUT:
            return False
        if identifier is not None:
            self.identifier = identifier
        value = self.identifier.strip()
        if not value:
            self.error = f"Please enter a {self.label} for the uploaded files."
            return False

        notes = (description if description is not None else self.description).strip()
        decision = MetadataDecision(
            identifier=value,
            items=self.pending,
            replacement_target=self.replacement_target,
            description=notes or None,
        )
        self._close(GateState.CONFIRMED)
        self._resolve(decision)
        return True

    def cancel(self) -> None:
        if self.state is not GateState.AWAITING_INPUT:
            return
        self._close(GateState.CANCELLED)
        self._resolve(None)

    def _resolve(self, decision: MetadataDecision | None) -> None:
        if self._decision is not None and not self._decision.done():
            self._decision.set_result(decision)

    def _close(self, state: GateState) -> None:
        self.state = state
        self.pending = ()
        self.replacement_target = None
        self.identifier = ""
        self.description = ""
        self.error = None
        self._prompt_open.clear()
