from mfg_attachments.utils.filesystem import StagedFile

MIB = 1024 * 1024
WORK_ORDER_ID = "WO-1"


class RecordingNotifier:
    def __init__(self):
        self.messages: list[tuple[str, str | None, bool]] = []

    def notify(self, title, description=None, *, error=False):
        self.messages.append((title, description, error))

    def titles(self) -> list[str]:
        return [title for title, _, _ in self.messages]

    def errors(self) -> list[tuple[str, str | None]]:
        return [(title, description) for title, description, error in self.messages if error]


class StubPicker:
    def __init__(self, *files: StagedFile):
        self.files = list(files)
        self.accepts: list[str] = []

    async def choose(self, accept, *, multiple=True):
        self.accepts.append(accept)
        return self.files if multiple else self.files[:1]


class StubConfirmer:
    def __init__(self, answer: bool):
        self.answer = answer
        self.questions: list[str] = []

    async def confirm(self, question):
        self.questions.append(question)
        return self.answer


def staged(name: str, size: int | None = None, content: bytes = b"data") -> StagedFile:
    if size is None:
        return StagedFile.from_bytes(name, content)
    return StagedFile(name=name, size=size, content=content)


async def answer_gate(gate, identifier: str, description: str | None = None) -> None:
    await gate.wait_for_prompt()
    assert gate.confirm(identifier, description)
