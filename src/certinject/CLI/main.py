# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Command Line Interface for certinject.
"""
import logging
import os
import click
from ..MODELS.cert_config import CertificateConfig
from ..PARSERS.config_parser import DEFAULT_CONFIG_FILE, ConfigParser, resolve_base_image
from ..PARSERS.dockerfile_parser import DockerfileParser
from ..PLANNERS.ca_certificate_manager import (
    CERTS_STAGING_DIR,
    detect_os_family,
    detect_runtime,
    generate_cert_install_commands,
    generate_copy_cert_entries,
    plan_certificates,
)
from ..BUILDERS.dockerfile_fragment import DockerfileFragmentBuilder

@click.group()
@click.option('--config', '-c', default=DEFAULT_CONFIG_FILE, help='Config file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, config, verbose):
    """
    certinject - CA certificate injection for container images.

    Generates the commands that make a container image trust custom CA certificates.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config

def _load_config(ctx) -> CertificateConfig:
    path = ctx.obj['config_file']
    if not os.path.exists(path):
        return CertificateConfig()
    try:
        return ConfigParser().parse(path)
    except (ValueError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

@cli.command()
@click.option('--base-image', '-b', required=True, help='Base image name, e.g. openjdk:11-jre-slim')
@click.argument('certs', nargs=-1)
def commands(base_image, certs):
    """Print the certificate install commands, one per line."""
    for command in generate_cert_install_commands(base_image, list(certs)):
        click.echo(command)

@cli.command(name='copy-entries')
@click.option('--target-dir', '-t', default=CERTS_STAGING_DIR, help='Directory in the image')
@click.argument('certs', nargs=-1)
def copy_entries(target_dir, certs):
    """Print build-context source and image destination per certificate."""
    for entry in generate_copy_cert_entries(list(certs), target_dir):
        click.echo(f"{entry.source} {entry.destination}")

@cli.command()
@click.argument('image')
def detect(image):
    """Show the OS family and runtime detected for an image."""
    click.echo(f"{'OS FAMILY':15} {'RUNTIME':10}")
    click.echo("-" * 25)
    click.echo(f"{detect_os_family(image).value:15} {detect_runtime(image).value:10}")

@cli.command()
@click.option('--base-image', '-b', help='Base image name')
@click.option('--dockerfile', '-d', type=click.Path(dir_okay=False), help='Dockerfile to read the base image from')
@click.option('--user', '-u', help='User to restore after installing')
@click.argument('certs', nargs=-1)
@click.pass_context
def dockerfile(ctx, base_image, dockerfile, user, certs):
    """Render the Dockerfile instructions that install certificates."""
    config = _load_config(ctx)

    try:
        if base_image:
            image = base_image
        elif dockerfile:
            image = DockerfileParser().base_image_from_file(dockerfile)
        else:
            image = resolve_base_image(config)
    except OSError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    if not image:
        click.echo("Error: no base image given", err=True)
        ctx.exit(1)

    plan = plan_certificates(image, list(certs) or config.certificates)
    click.echo(DockerfileFragmentBuilder(plan, user=user or config.user).render(), nl=False)

def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})

if __name__ == '__main__':
    main()
