"""
Test harness for exercising delivery-cli and the build phases.

- :mod:`~delivery_build.testing.pty_spawn`: drive interactive commands on a pseudo-tty
- :mod:`~delivery_build.testing.stub_api`: HTTPS stand-in for the Delivery API
- :mod:`~delivery_build.testing.harness`: isolated environment with fake binaries
- :mod:`~delivery_build.testing.fixtures`: canned configuration documents
"""
