"""Hello World — the simplest server module.

Enable it from the console::

    > enable helloworld /hi

then visit ``/hi`` or ``/hi/greet/alice``.
"""

from modserver.module import ServerModule

module = ServerModule("helloworld")


@module.route("/")
def index():
    return "Hello World!"


@module.route("/greet/{name}")
def greet(name: str):
    return f"Hello, {name}!"
