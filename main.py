from rich.pretty import pprint

from argot import *

registry = Registry("remote", "manage tracked repositories")
registry.register(switch("verbose", "v", default=False, descr="show more details"))

add = registry.subcommand("add", "add a remote")
add.register(argument("name"))
add.register(argument("url"))
add.register(option("track", "t", "+", descr="branches to track"))
add.register(switch("fetch", "f", default=False, descr="fetch right after adding"))

remove = registry.subcommand("remove", "remove a remote")
remove.register(argument("name"))


if __name__ == '__main__':
    pprint(invoke(Parser(registry.finalize(), colorful=True)))
