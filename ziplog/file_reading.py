from __future__ import annotations

import abc
import sys

STDIN_NAME = "-"


class FileReader:
    """
    Iterator over the lines of one input source, with line endings removed. Lines
    are split on "\n" only, and decoded one at a time.

    A read failure in the middle of the source ends the iteration just as end of
    input does; the exception is kept in `read_error` so that the caller can report it.
    """
    @classmethod
    def get_reader(cls, name: str, encoding: str) -> FileReader:
        for subcls in cls.__subclasses__():
            if subcls is TextFileReader:
                continue
            if subcls._can_read(name):
                return subcls(name, encoding)
        return TextFileReader(name, encoding)

    @classmethod
    @abc.abstractmethod
    def _can_read(cls, fname: str) -> bool:
        """Override in subclasses"""

    @abc.abstractmethod
    def _close_reader(self):
        """Override in subclasses"""

    def __init__(self, file_name: str, encoding: str):
        self.file_name = file_name
        self.encoding = encoding
        self.read_error: Exception | None = None
        self._iter = iter(())

    def __iter__(self):
        return self

    def __next__(self) -> str:
        try:
            line = next(self._iter).decode(self.encoding)
        except StopIteration:
            self._finish()
            raise
        except (OSError, EOFError, UnicodeDecodeError) as exc:
            self.read_error = exc
            self._finish()
            raise StopIteration from exc
        return line.removesuffix("\n").removesuffix("\r")

    def _finish(self):
        self._close_reader()
        self._iter = iter(())


class TextFileReader(FileReader):
    @classmethod
    def _can_read(cls, fname: str) -> bool:
        return True

    def __init__(self, fname: str, encoding: str):
        super().__init__(fname, encoding)
        self._close_obj = open(self.file_name, "rb")
        self._iter = iter(self._close_obj)

    def _close_reader(self):
        self._close_obj.close()


class StdinReader(FileReader):
    @classmethod
    def _can_read(cls, fname: str) -> bool:
        return fname == STDIN_NAME

    def __init__(self, fname: str, encoding: str):
        super().__init__(fname, encoding)
        self._iter = iter(sys.stdin.buffer)

    def _close_reader(self):
        # stdin is not ours to close
        pass


class GzipFileReader(FileReader):
    @classmethod
    def _can_read(cls, fname: str) -> bool:
        return fname.endswith(".gz")

    def __init__(self, fname: str, encoding: str):
        import gzip

        super().__init__(fname, encoding)
        self._close_obj = gzip.GzipFile(filename=self.file_name)
        self._iter = iter(self._close_obj)

    def _close_reader(self):
        self._close_obj.close()
