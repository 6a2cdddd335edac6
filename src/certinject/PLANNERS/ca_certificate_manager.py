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
Planning of CA certificate installation inside container images.

Commands are chosen from the operating system family and runtime detected
in the base image name. Nothing here touches the filesystem; the caller is
expected to place each certificate under CERTS_STAGING_DIR in the image
(see generate_copy_cert_entries) before running the generated commands.
"""
import logging
import re
from types import MappingProxyType
from typing import List, Optional, Sequence

from ..MODELS.certificate import (
    CertificatePlan,
    CopyCertEntry,
    OSFamily,
    RuntimeKind,
    TrustStoreLayout,
)

logger = logging.getLogger(__name__)

ALPINE_PATTERN = re.compile(r"alpine", re.IGNORECASE)
DEBIAN_UBUNTU_PATTERN = re.compile(r"(debian|ubuntu)", re.IGNORECASE)
REDHAT_PATTERN = re.compile(r"(rhel|ubi|centos|fedora)", re.IGNORECASE)
JAVA_PATTERN = re.compile(r"(java|openjdk|jdk|jre|eclipse-temurin)", re.IGNORECASE)

# Checked in order, first match wins.
OS_FAMILY_PATTERNS = (
    (OSFamily.ALPINE, ALPINE_PATTERN),
    (OSFamily.DEBIAN_UBUNTU, DEBIAN_UBUNTU_PATTERN),
    (OSFamily.REDHAT, REDHAT_PATTERN),
)

CERTS_STAGING_DIR = "/tmp/certs"
JAVA_CERT_ALIAS_PREFIX = "jkube-cert-"
JAVA_STOREPASS = "changeit"
JAVA_CACERTS_LOCATIONS = (
    "$JAVA_HOME/lib/security/cacerts",
    "$JAVA_HOME/jre/lib/security/cacerts",
)

_DEBIAN_LAYOUT = TrustStoreLayout(
    trust_dir="/usr/local/share/ca-certificates/",
    refresh_command="update-ca-certificates",
)

TRUST_STORE_LAYOUTS = MappingProxyType({
    OSFamily.ALPINE: TrustStoreLayout(
        trust_dir="/usr/local/share/ca-certificates/",
        refresh_command="update-ca-certificates",
    ),
    OSFamily.DEBIAN_UBUNTU: _DEBIAN_LAYOUT,
    OSFamily.REDHAT: TrustStoreLayout(
        trust_dir="/etc/pki/ca-trust/source/anchors/",
        refresh_command="update-ca-trust",
    ),
    # Unmatched images get the Debian commands.
    OSFamily.UNKNOWN: _DEBIAN_LAYOUT,
})


def detect_os_family(base_image: str) -> OSFamily:
    """Classify the OS family of a base image from its name."""
    for family, pattern in OS_FAMILY_PATTERNS:
        if pattern.search(base_image):
            return family
    return OSFamily.UNKNOWN


def detect_runtime(base_image: str) -> RuntimeKind:
    """Classify the runtime of a base image from its name."""
    if JAVA_PATTERN.search(base_image):
        return RuntimeKind.JAVA
    return RuntimeKind.GENERIC


def trust_store_layout(os_family: OSFamily) -> TrustStoreLayout:
    return TRUST_STORE_LAYOUTS[os_family]


def get_certificate_filename_in_build_context(cert_path: str, index: int) -> str:
    """
    Name a certificate gets once copied into the build context.

    The index keeps certificates with the same file name apart.

    :param cert_path: Original certificate file path.
    :param index: Position of the certificate in the input list.
    :return: The renamed filename, e.g. 'cert-0-ca.crt'.
    """
    # Final path component only; "." and ".." segments are kept as written.
    name = cert_path.rstrip("/").rsplit("/", 1)[-1]
    return f"cert-{index}-{name}"


def generate_cert_install_commands(
    base_image: Optional[str], cert_paths: Optional[Sequence[str]]
) -> List[str]:
    """
    Generates the shell commands that install certificates into an image.

    System trust store commands come first; Java images additionally get
    their certificates imported into the JVM truststore.

    :param base_image: The base image name (e.g. 'openjdk:11-jre-slim', 'node:16-alpine').
    :param cert_paths: Certificate file paths, in install order.
    :return: Commands to run in the image, or an empty list when there is nothing to do.
    """
    if base_image is None or not cert_paths:
        return []

    os_family = detect_os_family(base_image)
    runtime = detect_runtime(base_image)
    logger.debug("Base image %s detected as %s/%s", base_image, os_family.value, runtime.value)

    commands = _generate_system_cert_commands(cert_paths, trust_store_layout(os_family))
    if runtime == RuntimeKind.JAVA:
        commands.extend(generate_java_cert_commands(cert_paths))
    return commands


def _generate_system_cert_commands(
    cert_paths: Sequence[str], layout: TrustStoreLayout
) -> List[str]:
    commands = []
    for i, cert_path in enumerate(cert_paths):
        cert_file_name = get_certificate_filename_in_build_context(cert_path, i)
        commands.append(f"cp {CERTS_STAGING_DIR}/{cert_file_name} {layout.trust_dir}")
    commands.append(layout.refresh_command)
    return commands


def generate_java_cert_commands(cert_paths: Sequence[str]) -> List[str]:
    """
    Generates keytool imports into the JVM truststore, one per certificate.

    Each command tries the JDK 9+ cacerts location, then the JDK 8 one, and
    always exits 0.
    """
    commands = []
    for i, cert_path in enumerate(cert_paths):
        cert_file_name = get_certificate_filename_in_build_context(cert_path, i)
        alias = f"{JAVA_CERT_ALIAS_PREFIX}{i}"
        imports = [
            f"keytool -importcert -noprompt -trustcacerts -alias {alias} "
            f"-file {CERTS_STAGING_DIR}/{cert_file_name} "
            f"-keystore {keystore} -storepass {JAVA_STOREPASS}"
            for keystore in JAVA_CACERTS_LOCATIONS
        ]
        commands.append(" || ".join(imports + ["true"]))
    return commands


def generate_copy_cert_entries(
    cert_paths: Optional[Sequence[str]], target_dir: str
) -> List[CopyCertEntry]:
    """
    Generates COPY source/destination pairs for certificate files.

    The source is the renamed file relative to the build context, not the
    original path.

    :param cert_paths: Certificate file paths.
    :param target_dir: Target directory in the container.
    :return: One entry per certificate, in input order.
    """
    if not cert_paths:
        return []

    entries = []
    for i, cert_path in enumerate(cert_paths):
        source_in_context = get_certificate_filename_in_build_context(cert_path, i)
        entries.append(CopyCertEntry(
            source=source_in_context,
            destination=f"{target_dir}/{source_in_context}",
        ))
    return entries


def plan_certificates(
    base_image: str,
    cert_paths: Optional[Sequence[str]],
) -> CertificatePlan:
    """
    Bundles the copy entries and install commands for one image.

    Certificates are copied to CERTS_STAGING_DIR, where the commands read them.
    """
    return CertificatePlan(
        base_image=base_image,
        os_family=detect_os_family(base_image),
        runtime=detect_runtime(base_image),
        copy_entries=generate_copy_cert_entries(cert_paths, CERTS_STAGING_DIR),
        commands=generate_cert_install_commands(base_image, cert_paths),
    )
