from fastapi.requests import HTTPConnection

from elysian_cafe.services.lifecycle import OrderLifecycle
from elysian_cafe.services.sequencer import OrderSequencer
from elysian_cafe.store import DocumentStore


def get_store(connection: HTTPConnection) -> DocumentStore:
    return connection.app.state.store


def get_sequencer(connection: HTTPConnection) -> OrderSequencer:
    return connection.app.state.sequencer


def get_lifecycle(connection: HTTPConnection) -> OrderLifecycle:
    return connection.app.state.lifecycle
