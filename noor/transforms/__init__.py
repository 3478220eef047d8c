"""Record shapes shared by the remote and mirror tiers"""
