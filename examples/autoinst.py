import partplan
from partplan.devices import DiskDevice
from partplan.proposal import AutoinstProposal
from partplan.size import Size
from partplan.util import set_up_logging

set_up_logging()

graph = partplan.Devicegraph()
graph.add_device(DiskDevice("sda", size=Size("100GiB")))
graph.add_device(DiskDevice("sdb", size=Size("20GiB")))

profile = [{"device": "/dev/sda", "use": "all", "initialize": True,
            "partitions": [{"mount": "/", "size": "40GiB"},
                           {"mount": "swap", "size": "auto"},
                           {"mount": "/home", "size": "max"}]},
           {"device": "/dev/sdb", "use": "all",
            "partitions": [{"mount": "/srv", "filesystem": "xfs"}]}]

proposal = AutoinstProposal(partitioning=profile, devicegraph=graph)
proposal.propose()

for issue in proposal.issues_list:
    print(issue.message)

if proposal.failed:
    print("the profile does not fit in the disks")
else:
    print(proposal.devices)
