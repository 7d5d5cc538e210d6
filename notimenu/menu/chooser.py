"""Chooser transport: feed a menu to an external selector and read one line back."""

import logging
import os
import selectors
import subprocess
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_MAX_LINE = 1023
REAP_GRACE = 1.0  # Seconds a chooser gets to exit after its pipes are closed

_READ_CHUNK = 4096
_WRITE_CHUNK = 4096


@dataclass
class ChooserSession:
    """A running chooser process with its input and output pipes.

    Use as a context manager: on exit both pipes are closed and the
    process is reaped, whatever happened in between.
    """

    process: subprocess.Popen
    command: List[str]

    @classmethod
    def spawn(cls, command: Sequence[str]) -> "ChooserSession":
        """Start the chooser with stdin and stdout connected to pipes.

        Raises:
            OSError: If the pipes cannot be created or the command cannot run
        """
        process = subprocess.Popen(
            list(command),
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
        )
        logger.debug(f"Started chooser {command[0]} (pid={process.pid})")
        return cls(process=process, command=list(command))

    def __enter__(self) -> "ChooserSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def exchange(
        self,
        payload: bytes,
        timeout: Optional[float] = None,
        max_length: int = DEFAULT_MAX_LINE,
    ) -> bytes:
        """Write payload to the chooser and collect its first line of output.

        Writing and reading are multiplexed, so a chooser that answers before
        it has consumed all of its input cannot block the exchange. Input is
        closed once fully written to signal the end of the menu.

        Args:
            payload: Menu bytes for the chooser's stdin
            timeout: Seconds for the whole exchange (None waits forever)
            max_length: Stop reading once this many bytes have arrived

        Returns:
            Raw bytes read, possibly empty, possibly past the first newline

        Raises:
            subprocess.TimeoutExpired: If the chooser does not answer in time
        """
        stdin, stdout = self.process.stdin, self.process.stdout
        deadline = None if timeout is None else time.monotonic() + timeout
        view = memoryview(payload)
        offset = 0
        output = bytearray()
        reading = True

        with selectors.DefaultSelector() as selector:
            if payload:
                os.set_blocking(stdin.fileno(), False)
                selector.register(stdin, selectors.EVENT_WRITE)
            else:
                self.close_input()
            selector.register(stdout, selectors.EVENT_READ)

            while reading:
                remaining = None
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise subprocess.TimeoutExpired(self.command, timeout, output=bytes(output))

                for key, _ in selector.select(remaining):
                    if key.fileobj is stdin:
                        offset = self._write_chunk(selector, view, offset)
                        continue

                    chunk = os.read(key.fd, _READ_CHUNK)
                    output += chunk
                    if not chunk or b"\n" in output or len(output) >= max_length:
                        reading = False

        return bytes(output)

    def _write_chunk(self, selector: selectors.BaseSelector, view: memoryview, offset: int) -> int:
        stdin = self.process.stdin
        try:
            offset += os.write(stdin.fileno(), view[offset:offset + _WRITE_CHUNK])
        except BlockingIOError:
            return offset
        except OSError as e:
            logger.error(f"write() to chooser failed after {offset} bytes: {e}")
            selector.unregister(stdin)
            self.close_input()
            return offset

        if offset >= len(view):
            selector.unregister(stdin)
            self.close_input()
        return offset

    def close_input(self) -> None:
        """Close the chooser's stdin pipe (signals end of menu)."""
        stdin = self.process.stdin
        if stdin is not None and not stdin.closed:
            try:
                stdin.close()
            except OSError as e:
                logger.debug(f"Closing chooser input failed: {e}")

    def close_output(self) -> None:
        """Close the pipe carrying the chooser's stdout."""
        stdout = self.process.stdout
        if stdout is not None and not stdout.closed:
            stdout.close()

    def kill(self) -> None:
        """Kill the chooser if it is still running."""
        if self.process.poll() is None:
            self.process.kill()

    def close(self) -> None:
        """Close both pipes and reap the chooser."""
        self.close_input()
        self.close_output()

        try:
            returncode = self.process.wait(timeout=REAP_GRACE)
        except subprocess.TimeoutExpired:
            logger.warning(f"Chooser {self.command[0]} did not exit, killing it")
            self.process.kill()
            returncode = self.process.wait()

        if returncode != 0:
            logger.debug(f"Chooser {self.command[0]} exited with status {returncode}")


def parse_selection(output: bytes, max_length: int = DEFAULT_MAX_LINE) -> Optional[str]:
    """Turn raw chooser output into the selected line.

    Args:
        output: Bytes read from the chooser
        max_length: Longest line kept

    Returns:
        First line without its line ending, or None if there is no selection
    """
    line = output.split(b"\n", 1)[0]
    if len(line) > max_length:
        logger.warning(f"Chooser output longer than {max_length} bytes, truncating")
        line = line[:max_length]

    line = line.rstrip(b"\r")
    if not line:
        return None
    return line.decode("utf-8", errors="replace")


def run_chooser(
    menu_text: str,
    command: Sequence[str],
    timeout: Optional[float] = None,
    max_length: int = DEFAULT_MAX_LINE,
) -> Optional[str]:
    """Let the user pick one line of menu_text with an external chooser.

    Args:
        menu_text: Newline-separated menu entries
        command: Chooser argv, e.g. ["dmenu", "-p", "dunst:"]
        timeout: Seconds to wait for a selection (None waits forever)
        max_length: Maximum bytes of selection to read

    Returns:
        The selected line, or None if the menu was empty, the chooser
        failed, timed out or produced no output
    """
    if not menu_text:
        logger.debug("Menu is empty, not starting chooser")
        return None

    if not command:
        logger.error("No chooser command configured")
        return None

    try:
        session = ChooserSession.spawn(command)
    except OSError as e:
        logger.error(f"Failed to start chooser {command[0]}: {e}")
        return None

    with session:
        try:
            output = session.exchange(
                menu_text.encode("utf-8"),
                timeout=timeout,
                max_length=max_length,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"No selection from {command[0]} within {timeout}s, killing it")
            session.kill()
            return None
        except OSError as e:
            logger.error(f"Reading from chooser {command[0]} failed: {e}")
            session.kill()
            return None

    if not output:
        logger.debug("Chooser produced no output")
        return None

    return parse_selection(output, max_length)
