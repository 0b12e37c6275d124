import asyncio
import sys
from pathlib import Path

import click

from apps.shopify.config.constants import DRAFTS_FILENAME, Category
from apps.shopify.config.settings import settings
from apps.shopify.core.session import BatchReport, ListingSession
from apps.shopify.models.product import Product
from apps.shopify.utils.errors import ListingError
from apps.shopify.utils.shopify_client import ShopifyClient
from common.logger import logger


def _confirm_product(product: Product) -> bool:
    click.echo("")
    click.secho(product.title, bold=True)
    click.echo(f"  category: {product.category.value}   price: {product.price:.2f}   images: {len(product.images)}")
    return click.confirm("Create this product in Shopify?", default=True)


def _edit_listings(session: ListingSession):
    for index, listing in enumerate(session.listings):
        click.secho(f"\n[{index + 1}/{len(session.listings)}] {listing.title}", bold=True)
        if not click.confirm("Edit this listing?", default=False):
            continue

        title = click.prompt("Title", default=listing.title)
        category = click.prompt("Category", type=click.Choice([c.value for c in Category]), default=listing.category.value)
        price = click.prompt("Price", type=float, default=listing.price)
        size = click.edit(listing.size) or listing.size
        description = click.edit(listing.description) or listing.description
        session.edit(index, title=title, category=category, price=price, size=size, description=description)


def _report(report: BatchReport):
    logger.info(f"Created {len(report.created)} of {report.total} products, skipped {len(report.skipped)}")
    for created in report.created:
        logger.info(f"  {created.title}: {created.id} ({created.handle})")
    if report.halted:
        logger.fail(f"Batch halted: {report.error}")
        sys.exit(1)


async def _publish(session: ListingSession, yes: bool) -> BatchReport:
    async with ShopifyClient() as client:
        return await session.publish(client, confirm=None if yes else _confirm_product)


@click.group()
def shopify_cli():
    """Shopify listing CLI - turn clothing photos into published Shopify products"""
    logger.set_level(settings.LOG_LEVEL)


@shopify_cli.command()
@click.argument("images", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Where to write the drafts JSON")
@click.option("--no-compress", is_flag=True, help="Send original images to the model")
def infer(images: tuple[Path, ...], output: Path | None, no_compress: bool):
    """Group IMAGES into product drafts and save them for review"""
    output = output or settings.DATA_PATH.joinpath(DRAFTS_FILENAME)
    session = ListingSession(compress=not no_compress)
    session.upload(list(images))

    try:
        listings = asyncio.run(session.infer())
    except ListingError as e:
        logger.fail(f"Error processing images: {e}")
        sys.exit(1)

    if session.save(output):
        logger.succeed(f"Saved {len(listings)} drafts to {output}")


@shopify_cli.command()
@click.argument("drafts", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-y", "--yes", is_flag=True, help="Create every product without asking")
def publish(drafts: Path, yes: bool):
    """Create the products listed in a DRAFTS JSON file"""
    session = ListingSession.load(drafts)
    if not session.listings:
        logger.warning("No products in drafts file. Exiting.")
        return

    _report(asyncio.run(_publish(session, yes)))


@shopify_cli.command()
@click.argument("images", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-y", "--yes", is_flag=True, help="Create every product without asking")
@click.option("--edit/--no-edit", default=True, help="Review and edit each listing before publishing")
@click.option("--no-compress", is_flag=True, help="Send original images to the model")
def run(images: tuple[Path, ...], yes: bool, edit: bool, no_compress: bool):
    """Upload IMAGES, generate listings, review them and publish in one go"""
    session = ListingSession(compress=not no_compress)
    session.upload(list(images))

    try:
        asyncio.run(session.infer())
    except ListingError as e:
        logger.fail(f"Error processing images: {e}")
        sys.exit(1)

    if edit:
        _edit_listings(session)

    _report(asyncio.run(_publish(session, yes)))
