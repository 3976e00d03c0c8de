import io
import os
import sys
from types import SimpleNamespace
from ziplog.ziplog import PrefixedFile, ZipLogApplication
from contextlib import redirect_stdout


class ZipLogTestApp:
    def __init__(self, input_files, **kwargs):
        if isinstance(input_files, (str, os.PathLike)):
            input_files = [input_files]

        args = dict(
            files=[str(f) for f in input_files],
            prefix="> ",
            prefixed_files=[],
            interval=None,
            encoding="UTF-8",
            color="never",
            csv=None,
        )
        args.update(kwargs)
        args["prefixed_files"] = [
            pf if isinstance(pf, PrefixedFile) else PrefixedFile.from_string(str(pf))
            for pf in args["prefixed_files"]
        ]
        self.args = SimpleNamespace(**args)
        self.app = None

    def __call__(self) -> list[str]:
        with redirect_stdout(io.StringIO()) as capture:
            self.app = ZipLogApplication(self.args)  # noqa
            self.app.run()

        lines = capture.getvalue().split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        return lines


if __name__ == '__main__':
    from pprint import pprint
    pprint(ZipLogTestApp(sys.argv[1:])(), width=300)
