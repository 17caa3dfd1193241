"""
Command-line interface for wkb-reader.

Input files contain one hex-encoded WKB geometry per line, optionally
preceded by an identifier and a tab. Blank lines and lines starting with '#'
are skipped.

Usage:
    wkb-reader info <file>
    wkb-reader dump <file> [--format FORMAT]
    wkb-reader convert <file> <output.geojson|output.gpkg> [--crs CRS]
"""

import json
import logging
import sys
from pathlib import Path

import click

from .batch import DecodedBatch, decode_batch
from .converters import to_geojson_geometry, to_wkt, write_geojson, write_geopackage
from .errors import WKBError

logger = logging.getLogger(__name__)


def read_hex_file(path: str) -> tuple[list[bytes], list[str] | None]:
    """
    Read hex WKB lines from a text file.

    Returns:
        Tuple of (buffers, identifiers); identifiers is None when no line
        carries one

    Raises:
        InvalidInputError: If ids are given on some lines only
        ValueError: If a line is not valid hex
    """
    buffers: list[bytes] = []
    ids: list[str | None] = []
    with Path(path).open() as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            ident, sep, hex_text = line.rpartition("\t")
            try:
                buffers.append(bytes.fromhex(hex_text))
            except ValueError:
                raise ValueError(f"Line {lineno}: not a hex string") from None
            ids.append(ident.strip() if sep else None)

    if all(i is None for i in ids):
        return buffers, None
    if any(i is None for i in ids):
        raise ValueError("Identifiers must be given on every line or on none")
    return buffers, [i for i in ids if i is not None]


def _load_batch(path: str, crs: str | None = None, strict: bool = False) -> DecodedBatch:
    try:
        buffers, ids = read_hex_file(path)
        batch = decode_batch(buffers, ids, crs, strict=strict)
    except (WKBError, ValueError, OSError) as e:
        click.echo(f"Error reading {path}: {e}", err=True)
        sys.exit(1)
    logger.debug("Loaded %d geometries from %s", len(batch), path)
    return batch


@click.group()
@click.version_option()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """
    Decode little-endian OGC Well-Known Binary (WKB) geometries.

    Supports Point, LineString, Polygon, MultiPoint, MultiLineString and
    MultiPolygon.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


@main.command()
@click.argument("path", type=click.Path(exists=True))
@click.option("--crs", help="Coordinate reference system of the input")
@click.option("--strict", is_flag=True, help="Reject invalid geometries")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(path: str, crs: str | None, strict: bool, output_json: bool):
    """
    Display the geometry type and size of a WKB file.
    """
    batch = _load_batch(path, crs, strict)

    if output_json:
        data: dict[str, str | int | None] = {
            "path": path,
            "geometry_type": batch.geometry_type.label,
            "shape": batch.shape.value,
            "count": len(batch),
            "crs": crs,
        }
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"File: {path}")
    click.echo(f"Type: {batch.geometry_type.label}")
    click.echo(f"Shape: {batch.shape.value}")
    click.echo(f"Geometries: {len(batch):,}")
    if crs:
        click.echo(f"CRS: {crs}")


@main.command()
@click.argument("path", type=click.Path(exists=True))
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["wkt", "geojson"]),
    default="wkt",
    help="Output format for geometries",
)
@click.option(
    "--limit",
    "-n",
    type=int,
    default=10,
    help="Number of geometries to show (default: 10)",
)
def dump(path: str, output_format: str, limit: int):
    """
    Dump decoded geometries.

    Example:
        wkb-reader dump points.txt -n 5
    """
    batch = _load_batch(path)

    for i, (ident, geom) in enumerate(batch):
        if i >= limit:
            break
        if output_format == "wkt":
            click.echo(f"{ident}\t{to_wkt(geom)}")
        else:
            click.echo(f"{ident}\t{json.dumps(to_geojson_geometry(geom))}")


@main.command()
@click.argument("path", type=click.Path(exists=True))
@click.argument("output", type=click.Path())
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["geojson", "gpkg"]),
    help="Output format (default: auto-detect from extension)",
)
@click.option("--crs", help="Coordinate reference system of the input")
@click.option("--strict", is_flag=True, help="Reject invalid geometries")
@click.option("--compact", is_flag=True, help="Compact JSON output (no indentation)")
def convert(
    path: str,
    output: str,
    output_format: str | None,
    crs: str | None,
    strict: bool,
    compact: bool,
):
    """
    Convert a WKB file to GeoJSON or GeoPackage.

    Examples:
        wkb-reader convert parcels.txt parcels.geojson
        wkb-reader convert parcels.txt parcels.gpkg --crs EPSG:4326
    """
    batch = _load_batch(path, crs, strict)

    if output_format:
        fmt = output_format
    elif Path(output).suffix.lower() == ".gpkg":
        fmt = "gpkg"
    else:
        fmt = "geojson"

    click.echo(f"Converting {len(batch):,} {batch.geometry_type.label} geometries to {fmt}...")

    try:
        if fmt == "gpkg":
            count = write_geopackage(batch, output)
        else:
            count = write_geojson(batch, output, indent=None if compact else 2)
    except (WKBError, OSError) as e:
        click.echo(f"Error during conversion: {e}", err=True)
        sys.exit(1)

    click.echo(f"Wrote {count:,} features to {output}")


if __name__ == "__main__":
    main()
