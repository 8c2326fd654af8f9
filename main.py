from rich.pretty import pprint

from cmdtools import *

__prog__ = "cmdtools-demo"

registry = Registry(shell=True, colorful=True)


@registry.command(descr="Greets someone.")
@parameter("name", STRING, "Who to greet.", ordinal=1)
@parameter("times", INT, "How often to greet.", default=1, ordinal=2)
@parameter("loud", BOOLEAN, "Whether to shout the greeting.", default=False)
def greet(values, stream):
    greeting = "Hello, %s!" % values["name"]
    for _ in range(values["times"]):
        stream.write((greeting.upper() if values["loud"] else greeting) + "\n")


if __name__ == '__main__':
    pprint(registry)
    invoke(registry)
