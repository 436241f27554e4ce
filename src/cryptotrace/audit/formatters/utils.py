"""Utility functions for the cryptotrace report formatters."""
import io


def wrap_file_object(fileobj):
    """If the fileobj passed in cannot handle text, use TextIOWrapper
    to handle the conversion.
    """
    if isinstance(fileobj, io.TextIOBase):
        return fileobj
    return io.TextIOWrapper(fileobj, encoding="utf-8")


def write_output(fileobj, text):
    """Write `text` to `fileobj` without closing it; the caller owns it."""
    out = wrap_file_object(fileobj)
    out.write(text)
    out.flush()
    if out is not fileobj:
        # Keep the wrapper from closing the underlying binary stream
        out.detach()
