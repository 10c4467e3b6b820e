"""
Hardware Selection Workflow

The add-hardware flow is modelled as an immutable SelectionState and a pure
``transition(state, event)`` function. HardwareWorkflow drives it: it issues
catalog fetches, feeds their outcomes back as events and notifies
subscribers (the rendering layer) after every change.

Fetch outcomes carry the token of the request that produced them. Only the
most recently issued request may change the firmware list; older ones still
release their share of the loading indicator when they finish.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Callable, Iterator, List, Optional, Tuple, Union

from peardb.catalog.async_client import AsyncCatalogClient
from peardb.catalog.interfaces import DeviceRecord, FirmwareRecord
from peardb.constants import DEFAULT_FIRMWARE_PICK, DEFAULT_FIRMWARE_PLATFORM
from peardb.devices import device_types, devices_for_type
from peardb.exceptions import CatalogError, PersistenceError
from peardb.firmware import (
    Channel,
    default_firmware,
    filter_for_device,
    selectable_firmware,
)
from peardb.identifiers import normalize_identifier
from peardb.log_utils import logger
from peardb.store import HardwareEntry
from peardb.writer import PersistenceWriter


@dataclass(frozen=True)
class SelectionState:
    """Transient, UI-scoped state of one add-hardware session."""

    devices: Tuple[DeviceRecord, ...] = ()
    show_all_types: bool = False
    selected_type: Optional[str] = None
    selected_device: Optional[DeviceRecord] = None
    selected_board: Optional[str] = None
    channel: Channel = Channel.RELEASE
    device_key: Optional[str] = None
    firmware_entries: Tuple[FirmwareRecord, ...] = ()
    selected_firmware: Optional[FirmwareRecord] = None
    default_pick: str = DEFAULT_FIRMWARE_PICK
    pending_fetches: int = 0
    latest_token: int = 0
    last_error: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.pending_fetches > 0

    @property
    def device_types(self) -> List[str]:
        return device_types(self.devices, self.show_all_types)

    @property
    def available_devices(self) -> List[DeviceRecord]:
        if self.selected_type is None:
            return []
        return devices_for_type(self.devices, self.selected_type)

    @property
    def board_options(self) -> Tuple[str, ...]:
        if self.selected_device is None:
            return ()
        return self.selected_device.board_options

    @property
    def selectable_firmware(self) -> List[FirmwareRecord]:
        return selectable_firmware(self.firmware_entries, self.channel)

    @property
    def can_save(self) -> bool:
        if self.selected_type is None or self.selected_device is None:
            return False
        if len(self.board_options) > 1 and self.selected_board is None:
            return False
        return (
            self.selected_firmware is not None
            and self.selected_firmware in self.selectable_firmware
        )


# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True)
class LoadingStarted:
    pass


@dataclass(frozen=True)
class LoadingFinished:
    pass


@dataclass(frozen=True)
class DevicesLoaded:
    devices: Tuple[DeviceRecord, ...]


@dataclass(frozen=True)
class DevicesFailed:
    message: str


@dataclass(frozen=True)
class ShowAllTypesToggled:
    show_all: bool


@dataclass(frozen=True)
class TypeSelected:
    device_type: Optional[str]


@dataclass(frozen=True)
class DeviceSelected:
    device: Optional[DeviceRecord]


@dataclass(frozen=True)
class BoardSelected:
    board: Optional[str]


@dataclass(frozen=True)
class ChannelSelected:
    channel: Channel


@dataclass(frozen=True)
class FirmwareSelected:
    firmware: Optional[FirmwareRecord]


@dataclass(frozen=True)
class FirmwareRequested:
    token: int
    device_key: str


@dataclass(frozen=True)
class FirmwareLoaded:
    token: int
    entries: Tuple[FirmwareRecord, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class FirmwareFailed:
    token: int
    message: str


@dataclass(frozen=True)
class SaveFailed:
    message: str


@dataclass(frozen=True)
class Saved:
    entry: HardwareEntry


Event = Union[
    LoadingStarted,
    LoadingFinished,
    DevicesLoaded,
    DevicesFailed,
    ShowAllTypesToggled,
    TypeSelected,
    DeviceSelected,
    BoardSelected,
    ChannelSelected,
    FirmwareSelected,
    FirmwareRequested,
    FirmwareLoaded,
    FirmwareFailed,
    SaveFailed,
    Saved,
]


def _with_default_firmware(state: SelectionState) -> SelectionState:
    return replace(
        state,
        selected_firmware=default_firmware(
            state.selectable_firmware, state.default_pick
        ),
    )


def _is_current(state: SelectionState, token: int) -> bool:
    # A device or type change since the request clears device_key
    return state.device_key is not None and token == state.latest_token


def transition(state: SelectionState, event: Event) -> SelectionState:
    """
    Return the state that results from applying `event` to `state`.

    Raises:
        TypeError: If `event` is not a known event type.
    """
    if isinstance(event, LoadingStarted):
        return replace(state, pending_fetches=state.pending_fetches + 1)

    if isinstance(event, LoadingFinished):
        return replace(state, pending_fetches=max(state.pending_fetches - 1, 0))

    if isinstance(event, DevicesLoaded):
        return replace(state, devices=tuple(event.devices), last_error=None)

    if isinstance(event, DevicesFailed):
        return replace(state, last_error=event.message)

    if isinstance(event, ShowAllTypesToggled):
        return replace(state, show_all_types=event.show_all)

    if isinstance(event, TypeSelected):
        return replace(
            state,
            selected_type=event.device_type,
            selected_device=None,
            selected_board=None,
            device_key=None,
            firmware_entries=(),
            selected_firmware=None,
        )

    if isinstance(event, DeviceSelected):
        boards = event.device.board_options if event.device else ()
        return replace(
            state,
            selected_device=event.device,
            selected_board=boards[0] if len(boards) == 1 else None,
            device_key=None,
            firmware_entries=(),
            selected_firmware=None,
        )

    if isinstance(event, BoardSelected):
        if event.board is not None and event.board not in state.board_options:
            return state
        return replace(state, selected_board=event.board)

    if isinstance(event, ChannelSelected):
        return _with_default_firmware(replace(state, channel=event.channel))

    if isinstance(event, FirmwareSelected):
        selectable = state.selectable_firmware
        if event.firmware is not None and event.firmware not in selectable:
            return state
        return replace(state, selected_firmware=event.firmware)

    if isinstance(event, FirmwareRequested):
        return replace(
            state,
            latest_token=event.token,
            device_key=event.device_key,
            last_error=None,
        )

    if isinstance(event, FirmwareLoaded):
        if not _is_current(state, event.token):
            return state
        return _with_default_firmware(
            replace(state, firmware_entries=tuple(event.entries))
        )

    if isinstance(event, FirmwareFailed):
        if not _is_current(state, event.token):
            return state
        return replace(
            state, firmware_entries=(), selected_firmware=None, last_error=event.message
        )

    if isinstance(event, SaveFailed):
        return replace(state, last_error=event.message)

    if isinstance(event, Saved):
        return replace(
            state,
            devices=(),
            selected_type=None,
            selected_device=None,
            selected_board=None,
            device_key=None,
            firmware_entries=(),
            selected_firmware=None,
            last_error=None,
        )

    raise TypeError(f"Unknown selection event: {event!r}")


Listener = Callable[[SelectionState], None]


class HardwareWorkflow:
    """
    Drives a SelectionState through catalog fetches and the final save.

    Example:
        async with AsyncCatalogClient() as client:
            workflow = HardwareWorkflow(client, PersistenceWriter(store))
            await workflow.load_devices()
            workflow.dispatch(TypeSelected("iPhone"))
            await workflow.choose_device(workflow.state.available_devices[0])
            entry = workflow.save()
    """

    def __init__(
        self,
        client: AsyncCatalogClient,
        writer: PersistenceWriter,
        platform: str = DEFAULT_FIRMWARE_PLATFORM,
        default_pick: str = DEFAULT_FIRMWARE_PICK,
        channel: Channel = Channel.RELEASE,
        show_all_types: bool = False,
    ):
        self.client = client
        self.writer = writer
        self.platform = platform
        self.state = SelectionState(
            default_pick=default_pick, channel=channel, show_all_types=show_all_types
        )
        self._listeners: List[Listener] = []
        self._next_token = 0

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener` for state changes; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, event: Event) -> SelectionState:
        self.state = transition(self.state, event)
        for listener in list(self._listeners):
            listener(self.state)
        return self.state

    @contextmanager
    def _loading(self) -> Iterator[None]:
        self.dispatch(LoadingStarted())
        try:
            yield
        finally:
            self.dispatch(LoadingFinished())

    async def load_devices(self) -> bool:
        """
        Fetch the device list into the state.

        Returns:
            bool: True on success; False when the catalog failed (already logged).
        """
        with self._loading():
            try:
                devices = await self.client.fetch_device_list()
            except CatalogError as e:
                logger.error(f"Error fetching device list: {e}")
                self.dispatch(DevicesFailed(str(e)))
                return False
            self.dispatch(DevicesLoaded(tuple(devices)))
            return True

    async def choose_device(self, device: Optional[DeviceRecord]) -> None:
        """
        Select `device` and load the firmware that applies to it.

        Catalog failures are logged and recorded in `state.last_error`; the
        loading count is released on every exit path.
        """
        self.dispatch(DeviceSelected(device))
        if device is None:
            return

        device_key = normalize_identifier(device)
        self._next_token += 1
        token = self._next_token
        self.dispatch(FirmwareRequested(token, device_key))

        with self._loading():
            try:
                await self.client.fetch_device(device_key)
                catalog = await self.client.fetch_firmware_catalog(self.platform)
            except CatalogError as e:
                logger.error(f"Error fetching firmware for {device_key}: {e}")
                self.dispatch(FirmwareFailed(token, str(e)))
                return

            entries = filter_for_device(catalog, device_key)
            logger.info(f"Found {len(entries)} firmware entries for {device_key}")
            self.dispatch(FirmwareLoaded(token, tuple(entries)))

    def save(self) -> Optional[HardwareEntry]:
        """
        Commit the current selection.

        Returns:
            HardwareEntry | None: The saved entry, or None when the selection
            is not complete enough to save.

        Raises:
            PersistenceError: If the store rejects the write; the selection is kept.
        """
        state = self.state
        if not state.can_save or state.selected_device is None:
            logger.warning("Save requested before the selection was complete")
            return None

        try:
            entry = self.writer.save(
                state.selected_device, state.selected_firmware, state.selected_board
            )
        except PersistenceError as e:
            self.dispatch(SaveFailed(str(e)))
            raise

        self.dispatch(Saved(entry))
        return entry
