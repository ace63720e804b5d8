from core.messages import CommandOutput


class Recorder:
    """Output function that keeps everything a session was sent."""

    def __init__(self):
        self.outputs: list[CommandOutput] = []
        self.inputs = []
        self.errors = []

    def __call__(self, session, output, command_input, error):
        self.outputs.append(output)
        self.inputs.append(command_input)
        self.errors.append(error)

    def tags(self) -> list[str]:
        return [o.output for o in self.outputs]

    def of(self, tag: str) -> list[CommandOutput]:
        return [o for o in self.outputs if o.output == tag]


class ScriptedInput:
    """Input function that plays back lines, then reports end of input."""

    def __init__(self, *lines):
        self.lines = list(lines)

    async def __call__(self, session):
        if not self.lines:
            raise EOFError
        return self.lines.pop(0)


async def never_ready(session):
    raise AssertionError("input should not be read in this test")
