import logging
from pathlib import Path

import archbox

archbox.init_logging(level=logging.INFO)
archbox.check()

settings = archbox.Settings.from_file(str(Path(__file__).parent / "archbox.yaml"))

# boot the guest
provider = archbox.Archlinux(settings)
machine = provider.init()
print(machine)

# dump the database on demand
provider.provision(["backup-postgres-app"])

# destroy the guest
provider.destroy()
