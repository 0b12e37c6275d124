import click

from apps.shopify.shopify_cli import shopify_cli


@click.group()
def cli():
    pass


cli.add_command(shopify_cli, name="shopify")


if __name__ == "__main__":
    cli()
