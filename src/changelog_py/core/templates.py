"""Default jinja2 templates for rendered changelog sections.

Each release section is rendered from a main template that includes
three partials: ``header`` (the release heading with its compare link),
``commit`` (one bullet) and ``footer`` (breaking change notes). Any of
them can be replaced through ``writer_opts``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import jinja2

if TYPE_CHECKING:
    from changelog_py.config.models import WriterOptions

MAIN_TEMPLATE = """\
{% include "header" %}

{% for group in commit_groups %}
### {{ group.title }}

{% for commit in group.commits %}
{% include "commit" %}
{% endfor %}

{% endfor %}
{% include "footer" %}
"""

HEADER_PARTIAL = """\
## {% if link_compare and previous_tag and current_tag and repo_url -%}
[{{ version }}]({{ repo_url }}/compare/{{ previous_tag }}...{{ current_tag }})
{%- else %}{{ version }}{% endif %}
{%- if title %} "{{ title }}"{% endif %}{% if date %} ({{ date }}){% endif %}

"""

COMMIT_PARTIAL = """\
* {% if commit.scope %}**{{ commit.scope }}:** {% endif %}{{ commit.subject }}
{%- if commit.hash %} ({% if repo_url -%}
[{{ commit.short_hash }}]({{ repo_url }}/commit/{{ commit.hash }})
{%- else %}{{ commit.short_hash }}{% endif %}){% endif %}

"""

FOOTER_PARTIAL = """\
{% for group in note_groups %}
### {{ group.title }}

{% for note in group.notes %}
* {% if note.scope %}**{{ note.scope }}:** {% endif %}{{ note.text }}
{% endfor %}

{% endfor %}
"""


def build_environment(writer_options: WriterOptions | None = None) -> jinja2.Environment:
    """Create the template environment, applying ``writer_opts`` overrides."""
    templates = {
        "main": MAIN_TEMPLATE,
        "header": HEADER_PARTIAL,
        "commit": COMMIT_PARTIAL,
        "footer": FOOTER_PARTIAL,
    }
    if writer_options is not None:
        overrides = {
            "main": writer_options.main_template,
            "header": writer_options.header_partial,
            "commit": writer_options.commit_partial,
            "footer": writer_options.footer_partial,
        }
        templates.update({name: source for name, source in overrides.items() if source})

    return jinja2.Environment(
        loader=jinja2.DictLoader(templates),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        autoescape=False,
    )
