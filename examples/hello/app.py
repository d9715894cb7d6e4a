"""Hello World — the simplest perch app.

Demonstrates exact routes, template captures, Response chaining, a
fallback route and a custom error response.

Run:
    python app.py
"""

from perch import App, Response, ServerConfig

app = App(ServerConfig(port=8080))

app.add_route("/", "Homepage")
app.add_route("demo", "demo")


@app.route("greet/:name")
def greet(ctx):
    return f"Hello, {ctx.captures['name']}!"


@app.route("custom")
def custom(ctx):
    return Response("Created").with_status(201).with_header("X-Custom", "perch")


app.add_error_response(404, "Nothing here")


@app.fallback()
def not_found(ctx):
    return app.get_error_response(404)


if __name__ == "__main__":
    app.run()
