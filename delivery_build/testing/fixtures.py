"""
Canned configuration documents used by scenarios.
"""

CUSTOM_CONFIG = """\
{
  "version": "2",
  "build_cookbook": {
    "path": ".delivery/build_cookbook",
    "name": "build_cookbook"
  },
  "skip_phases": [ "smoke", "security", "syntax", "unit", "quality" ],
  "job_dispatch": {
    "version": "v2"
  },
  "delivery-truck": {
    "publish": {
      "chef_server": true
    }
  },
  "dependencies": []
}
"""

CONFIG_WITH_CUSTOM_BUILD_COOKBOOK = """\
{
  "version": "2",
  "build_cookbook": {
    "path": "cookbooks/bubulubu",
    "name": "bubulubu"
  },
  "skip_phases": [],
  "job_dispatch": {
    "version": "v2"
  },
  "dependencies": []
}
"""

CONFIG_BUILD_COOKBOOK_FROM_SUPERMARKET = """\
{
  "version": "2",
  "build_cookbook": {
    "supermarket": "true",
    "name": "vikings"
  },
  "skip_phases": [],
  "job_dispatch": {
    "version": "v2"
  },
  "dependencies": []
}
"""

# "local_phase" is misspelled on purpose
INCOMPLETE_PROJECT_TOML = """\
[local_phase]
lint = "echo 'This file is wrong, we have missing phases'"
"""

PROJECT_TOML_WITH_FAILURES = """\
[local_phases]
lint = "foodcritic failure"
syntax = "chefstyle failure"
unit = "rspec failure"
"""

PARTIAL_PROJECT_TOML = """\
[local_phases]
lint = "echo 'This file is valid'"
"""

PROJECT_TOML = """\
[local_phases]
unit = "echo 'This is a cool unit test'"
lint = "cookstyle"
syntax = "foodcritic . -t ~supermarket"
provision = "echo 'Creating instances'"
deploy = "echo 'Converging instances'"
smoke = "echo 'Smoking tests'"
functional = "echo 'Functional tests'"
cleanup = "echo 'Cleaning up'"
"""

REMOTE_PROJECT_TOML = """\
[local_phases]
unit = "echo REMOTE-UNIT"
lint = "echo REMOTE-LINT"
syntax = "echo REMOTE-SYNTAX"
provision = "echo REMOTE-PROVISION"
deploy = "echo REMOTE-DEPLOY"
smoke = "echo REMOTE-SMOKE"
cleanup = "echo REMOTE-CLEANUP"
"""


def project_toml_with_remote_file(url: str) -> str:
    return f'remote_file = "{url}"\n'


DUMMY_CLI_TOML = """\
api_protocol = "https"
enterprise = "dummy"
api_port = "8080"
organization = "zelda"
server = "localhost"
user = "link"
"""

DUMMY_A2_CLI_TOML = DUMMY_CLI_TOML + "a2_mode = true\n"

VALID_CLI_TOML = """\
api_protocol = "https"
enterprise = "ent"
git_port = "8989"
organization = "org"
pipeline = "master"
server = "server.test"
user = "user"
"""

# The stub server listens on 8080, so the git port is 8080 too
BASIC_DELIVERY_CONFIG = """\
git_port = "8080"
pipeline = "master"
user = "dummy"
server = "127.0.0.1:8080"
enterprise = "dummy"
organization = "dummy"
"""

DEFAULT_DELIVERY_CONFIG = """\
{
  "version": "2",
  "build_cookbook": {
    "path": ".delivery/build_cookbook",
    "name": "build_cookbook"
  },
  "skip_phases": [],
  "job_dispatch": {
    "version": "v2"
  },
  "dependencies": []
}
"""

BASIC_GIT_CONFIG = """\
[config]
"""

FIXTURES = {
    "custom config.json": CUSTOM_CONFIG,
    "config.json with a custom build cookbook": CONFIG_WITH_CUSTOM_BUILD_COOKBOOK,
    "config.json with a Supermarket build cookbook": CONFIG_BUILD_COOKBOOK_FROM_SUPERMARKET,
    "incomplete project.toml": INCOMPLETE_PROJECT_TOML,
    "project.toml with failures": PROJECT_TOML_WITH_FAILURES,
    "partial project.toml": PARTIAL_PROJECT_TOML,
    "project.toml": PROJECT_TOML,
    "remote project.toml": REMOTE_PROJECT_TOML,
    "dummy cli.toml": DUMMY_CLI_TOML,
    "dummy a2 cli.toml": DUMMY_A2_CLI_TOML,
    "valid cli.toml": VALID_CLI_TOML,
    "basic delivery config": BASIC_DELIVERY_CONFIG,
    "default delivery config": DEFAULT_DELIVERY_CONFIG,
    "basic git config": BASIC_GIT_CONFIG,
}
