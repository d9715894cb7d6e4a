"""Static Site — a directory of files served under a web root.

Demonstrates ``add_static_route`` together with a web root: the site
lives under ``http://localhost:8080/site`` and files are looked up
relative to it, so ``/site/css/style.css`` reads ``public/css/style.css``.

Run:
    python app.py
"""

from pathlib import Path

from perch import App, Response, ServerConfig

PUBLIC_DIR = Path(__file__).parent / "public"

app = App(ServerConfig(port=8080, web_root="site"))


@app.route("/")
def index(ctx):
    html = (PUBLIC_DIR / "index.html").read_text()
    return Response(html, content_type="text/html; charset=utf-8")


app.add_static_route(["css/*", "js/*"], PUBLIC_DIR)
app.add_error_response(404, "Page not found")
app.set_fallback_route("*", lambda ctx: app.get_error_response(404))


if __name__ == "__main__":
    app.run()
