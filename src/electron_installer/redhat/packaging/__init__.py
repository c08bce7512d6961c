"""
The `packaging` sub-package contains the stages that turn a resolved set of
options into a Red Hat package.

This includes:
- Reading application metadata from an asar archive or an unpacked app.
- Assembling the package contents in the staging tree.
- Invoking `rpmbuild` and collecting the packages it produces.
"""
