from __future__ import annotations


class NotesError(Exception):
    """Base class for every failure raised by progress_notes."""


class StorageUnavailable(NotesError):
    """The local storage medium cannot be written."""


class StorageCorrupt(NotesError):
    """A stored blob exists but does not parse as the expected structure."""


class SaveFailed(NotesError):
    pass


class DeleteFailed(NotesError):
    pass


class NoteNotFound(NotesError, LookupError):
    def __init__(self, note_id: str):
        super().__init__(f"Note '{note_id}' not found")
        self.note_id = note_id


class ValidationFailed(NotesError, ValueError):
    def __init__(self, messages: list[str]):
        super().__init__("; ".join(messages))
        self.messages = list(messages)
