"""Self-contained HTML documents for outputs embedded through iframes."""

import html
import json
from typing import Any

HEIGHT_MESSAGE_TYPE = "nb-output-height"

BASE_STYLE = (
    "html,body{margin:0;padding:0;background:transparent;overflow:hidden;}"
    "body{font-family:inherit;}"
)

# Posts the content height to the embedding page on load and on every resize.
HEIGHT_REPORTER = """
(function () {
  var last = 0;
  function report() {
    var h = Math.ceil(document.documentElement.scrollHeight);
    if (h !== last) {
      last = h;
      window.parent.postMessage({type: "%(message_type)s", height: h}, "*");
    }
  }
  window.addEventListener("load", report);
  if (typeof ResizeObserver !== "undefined") {
    new ResizeObserver(report).observe(document.documentElement);
  } else {
    setInterval(report, 500);
  }
  report();
})();
""" % {"message_type": HEIGHT_MESSAGE_TYPE}


def html_document(body: str, head: str = "") -> str:
    """Wrap a body fragment in a complete HTML page.

    Args:
        body: Markup placed verbatim inside ``<body>``
        head: Extra markup for ``<head>`` (scripts, styles)

    Returns:
        str: The HTML document
    """
    return (
        "<!DOCTYPE html>"
        '<html><head><meta charset="utf-8"/>'
        '<meta name="viewport" content="width=device-width, initial-scale=1"/>'
        f"<style>{BASE_STYLE}</style>"
        f"{head}"
        "</head><body>"
        f"{body}"
        f"<script>{HEIGHT_REPORTER}</script>"
        "</body></html>"
    )


def plotly_document(figure: dict, cdn_url: str) -> str:
    """Build a page that draws a plotly figure.

    Args:
        figure: Plotly figure JSON (``data``, ``layout``, optional ``config``)
        cdn_url: URL of the plotly.js bundle

    Returns:
        str: The HTML document
    """
    layout = dict(figure.get("layout") or {})
    layout.setdefault("paper_bgcolor", "rgba(0,0,0,0)")
    layout.setdefault("plot_bgcolor", "rgba(0,0,0,0)")
    layout["autosize"] = True

    config = dict(figure.get("config") or {})
    config.setdefault("responsive", True)

    script = (
        "Plotly.newPlot("
        f'"nb-plot", {script_json(figure.get("data") or [])}, '
        f"{script_json(layout)}, {script_json(config)});"
    )
    body = (
        '<div id="nb-plot" style="width:100%;"></div>'
        f"<script>{script}</script>"
    )
    head = f'<script src="{html.escape(cdn_url)}" charset="utf-8"></script>'
    return html_document(body, head=head)


def script_json(value: Any) -> str:
    """Serialize a value for inline use inside a ``<script>`` element."""
    return json.dumps(value, sort_keys=True, ensure_ascii=False).replace("</", "<\\/")
