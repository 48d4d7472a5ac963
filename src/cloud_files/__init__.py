"""cloud-files - a client for Rackspace Cloud Files.

This package provides:
- Authentication against the Rackspace identity service
- Upload, download and deletion of objects in one container
- CDN URL lookup for container objects
- A command-line interface (``cloud-files``)
"""

__version__ = "0.1.0"
