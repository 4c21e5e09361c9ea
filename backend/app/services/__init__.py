# Services package init
"""
BaseDrop Backend — Services Layer
===================================

What:  Business logic layer sitting between routes (HTTP) and the flat files on disk.
How:   Services accept plain values and uploads, apply the submission rules,
       and return schema objects. Routes never touch the file system directly.

Service Inventory:
    - FileService: Image validation, storage, lookup and cleanup
    - CategoryStore: Read and append records in base/baseth<N>.json
    - SubmissionService: Orchestrates validate → store image → append record
"""
