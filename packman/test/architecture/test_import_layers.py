from __future__ import annotations

from ._utils import iter_source_files, matches_prefix, parse_imports

# Lower layers never import from the ones above them.
FORBIDDEN = {
    "core": ("packman.platform", "packman.svn", "packman.store", "packman.release", "packman.services", "packman.output", "packman.cli"),
    "platform": ("packman.svn", "packman.store", "packman.release", "packman.services", "packman.output", "packman.cli"),
    "svn": ("packman.store", "packman.release", "packman.services", "packman.output", "packman.cli"),
    "store": ("packman.services", "packman.output", "packman.cli"),
    "release": ("packman.services", "packman.output", "packman.cli"),
    "services": ("packman.output", "packman.cli"),
    "output": ("packman.services", "packman.cli"),
}


def test_layers_only_import_downwards() -> None:
    offenders: list[str] = []
    for rel, path in iter_source_files():
        layer = rel.split("/", 1)[0]
        forbidden = FORBIDDEN.get(layer, ())
        for item in parse_imports(path):
            if any(matches_prefix(item.module, prefix) for prefix in forbidden):
                offenders.append(f"{rel}:{item.line}: {layer} imports {item.module}")

    assert not offenders, "Layering violations:\n" + "\n".join(offenders)
