"""Playlist rewriting: route segment references back through the relay."""

import re
from urllib.parse import quote

from core.request_types import RewriteContext

SEGMENT_MARKER = ".ts"
ABSOLUTE_PREFIXES = ("http://", "https://")
SEGMENT_PROXY_PATH = "/ts-proxy"

# Line terminators of the playlist text; other control characters stay in the line.
_LINE_BREAK = re.compile(r"(\r\n|[\n\r\u2028\u2029])")


class ManifestTransformer:
    """Rewrite segment lines of an HLS playlist into relay links.

    Only lines that do not start with ``#`` and contain ``.ts`` are touched.
    Tags, comments, blank lines and other URIs are returned byte for byte,
    including their line endings.
    """

    def rewrite(self, content: str, context: RewriteContext) -> tuple[str, int]:
        """Return the rewritten playlist and the number of segment lines."""
        out: list[str] = []
        rewritten = 0
        parts = _LINE_BREAK.split(content)
        for line, ending in zip(parts[::2], parts[1::2] + [""]):
            if self.is_segment_line(line):
                out.append(self.proxy_link(line, context) + ending)
                rewritten += 1
            else:
                out.append(line + ending)
        return "".join(out), rewritten

    @staticmethod
    def is_segment_line(line: str) -> bool:
        return not line.startswith("#") and SEGMENT_MARKER in line

    @staticmethod
    def resolve(reference: str, base_url: str) -> str:
        """Prefix relative references with the playlist's directory."""
        reference = reference.strip()
        if reference.startswith(ABSOLUTE_PREFIXES):
            return reference
        return base_url + reference

    def proxy_link(self, line: str, context: RewriteContext) -> str:
        segment_url = self.resolve(line, context.base_url)
        link = f"{context.relay_origin}{SEGMENT_PROXY_PATH}?url={quote(segment_url, safe='')}"
        if context.headers_param:
            link += f"&headers={quote(context.headers_param, safe='')}"
        return link
