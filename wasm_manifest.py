"""Read the package name out of a Cargo manifest."""

from pathlib import Path


def extract_package_name(manifest_path, key="name"):
    """Return the quoted value on the first manifest line containing ``key``.

    The line is split on whitespace and the third field is taken, so
    ``name = "bubble"`` gives ``bubble``. A missing or unreadable file, a
    missing key or a short line all give an empty string. Bytes that are
    not valid UTF-8 are replaced rather than rejected.
    """
    path = Path(manifest_path)
    try:
        text = path.read_bytes().decode("utf-8", errors="replace")
    except OSError:
        return ""

    for line in text.splitlines():
        if key not in line:
            continue
        fields = line.split()
        if len(fields) < 3:
            return ""
        return fields[2].replace('"', "")
    return ""


def artifact_stem(package_name: str) -> str:
    # cargo names the .wasm after the crate, with dashes turned into underscores
    return package_name.replace("-", "_")
