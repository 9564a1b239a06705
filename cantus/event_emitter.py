import typing


CallbackType = typing.Callable[..., typing.Any]

# Listeners registered under this name receive every event as (event_name, payload).
ANY_EVENT = "*"


class EventEmitter:

	"""
	A synchronous event emitter for generation trace events.
	"""

	def __init__ (self) -> None:

		"""
		Initialize an empty event registry.
		"""

		self._listeners: typing.Dict[str, typing.List[CallbackType]] = {}


	def on (self, event_name: str, callback: CallbackType) -> None:

		"""
		Register a callback for an event name, or for every event with ``"*"``.
		"""

		if event_name not in self._listeners:
			self._listeners[event_name] = []

		self._listeners[event_name].append(callback)

	def off (self, event_name: str, callback: CallbackType) -> None:

		"""
		Unregister a previously registered callback.

		Raises ``ValueError`` if the callback is not registered for the event.
		"""

		if event_name not in self._listeners or callback not in self._listeners[event_name]:
			raise ValueError(f"Callback not registered for event {event_name!r}")

		self._listeners[event_name].remove(callback)


	def emit_sync (self, event_name: str, **payload: typing.Any) -> None:

		"""
		Emit an event and call its listeners immediately.

		Named listeners receive the payload as keyword arguments.  Catch-all
		listeners receive ``(event_name, payload)``.
		"""

		for callback in self._listeners.get(event_name, []):
			callback(**payload)

		for callback in self._listeners.get(ANY_EVENT, []):
			callback(event_name, dict(payload))
