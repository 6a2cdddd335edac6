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
Builders for the Dockerfile instructions that install CA certificates.
"""
from typing import Optional
from jinja2 import Template
from ..MODELS.certificate import CertificatePlan

FRAGMENT_TEMPLATE = """\
{% for entry in copy_entries %}COPY {{ entry.source }} {{ entry.destination }}
{% endfor %}{% if user %}USER root
{% endif %}RUN {{ commands | join(separator) }}
{% if user %}USER {{ user }}
{% endif %}"""

RUN_SEPARATOR = " && \\\n    "


class DockerfileFragmentBuilder:
    """
    Renders a certificate plan as Dockerfile instructions, to be appended
    after the FROM of the image it was planned for.
    """

    def __init__(self, plan: CertificatePlan, user: Optional[str] = None):
        """
        :param plan: The certificate plan to render.
        :param user: The image's runtime user. When set, the install runs as
                     root and the user is restored afterwards.
        """
        self.plan = plan
        self.user = user
        self.template = Template(FRAGMENT_TEMPLATE, keep_trailing_newline=True)

    def render(self) -> str:
        """
        :return: The Dockerfile fragment, or an empty string when there is nothing to install.
        """
        if not self.plan.commands:
            return ""
        return self.template.render(
            copy_entries=self.plan.copy_entries,
            commands=self.plan.commands,
            separator=RUN_SEPARATOR,
            user=self.user,
        )
