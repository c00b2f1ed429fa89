"""
delivery-build: build pipeline tooling for delivery-cli.

Builds, tests, packages and publishes the delivery-cli binary across the
Delivery pipeline phases by driving rustup/cargo, Omnibus, Artifactory and git.

Main features:
- Phase runner (prep, syntax, unit, quality, functional, provision, publish, release)
- Per-platform toolchain and OpenSSL installation strategies
- Omnibus definition rendering with a packaging rollback path
- Artifactory publishing, build records and promotions
- Acceptance-test harness: pseudo-tty spawner, HTTPS stub API, fake binaries
"""

__version__ = "0.1.0"
