"""``waypoint routes`` — print the route tree.

One line per pattern, indented by depth, with its full path, name, and
whether it has a builder and/or a redirect rule.
"""

import argparse

from waypoint.cli._resolve import load_router


def run_routes(args: argparse.Namespace) -> None:
    """List the route tree of a waypoint Router."""
    router = load_router(args.router, compile_tree=False)

    if not router.routes:
        print("No routes registered.")
        return

    rows: list[tuple[str, str, str]] = []
    for top in router.routes:
        for pattern, full_path, depth in top.walk():
            flags = []
            if pattern.builder is not None:
                flags.append("builder")
            if pattern.redirect is not None:
                flags.append("redirect")
            rows.append(("  " * depth + full_path, pattern.name or "-", ", ".join(flags) or "-"))

    max_path = max(max(len(r[0]) for r in rows), 4)  # "PATH" header
    max_name = max(max(len(r[1]) for r in rows), 4)  # "NAME" header

    fmt = f"{{:<{max_path}}}  {{:<{max_name}}}  {{}}"
    print(fmt.format("PATH", "NAME", "KIND"))
    sep_len = max_path + max_name + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for path, name, kind in rows:
        print(fmt.format(path, name, kind))
