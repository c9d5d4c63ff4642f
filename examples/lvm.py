import partplan
from partplan.devices import DiskDevice
from partplan.proposal import AutoinstProposal
from partplan.size import Size
from partplan.util import set_up_logging

set_up_logging()

manager = partplan.StorageManager()
disk = DiskDevice("sda", size=Size("100GiB"))
with manager.transaction() as graph:
    graph.add_device(disk)

profile = [{"device": "/dev/sda", "use": "all",
            "partitions": [{"mount": "/boot", "size": "1GiB"},
                           {"lvm_group": "system", "size": "max"}]},
           {"device": "/dev/system", "type": "CT_LVM",
            "partitions": [{"lv_name": "root", "mount": "/", "size": "20GiB"},
                           {"lv_name": "home", "mount": "/home", "size": "max"},
                           {"lv_name": "swap", "mount": "swap", "size": "2GiB"}]}]

proposal = AutoinstProposal(partitioning=profile, devicegraph=manager.current)
proposal.propose()
if manager.apply_proposal(proposal):
    print(manager.current)
else:
    print("no proposal: %s" % [i.message for i in proposal.issues_list])
