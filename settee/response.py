# settee: a small client for a CouchDB server
# Copyright (C) 2026 The Settee Developers
#
# This file is part of `settee`.
#
# `settee` is free software: you can redistribute it and/or modify it under
# the terms of the GNU Lesser General Public License as published by the Free
# Software Foundation, either version 3 of the License, or (at your option) any
# later version.
#
# `settee` is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY; without even the implied warranty of MERCHANTABILITY or FITNESS
# FOR A PARTICULAR PURPOSE.  See the GNU Lesser General Public License for more
# details.
#
# You should have received a copy of the GNU Lesser General Public License along
# with `settee`.  If not, see <http://www.gnu.org/licenses/>.
#
# Authors:
#   The Settee Developers
#

"""
Normalize decoded CouchDB responses.

CouchDB answers with many different JSON shapes: a document, a view, an index
listing, a replication job, a block of server statistics, and so on.  This
module maps a decoded JSON object into a result object whose attributes are
looked up by fixed key names.

There are two flavors:

    1. `DbResponse` is a single record with an attribute for every field any
       CouchDB endpoint might return.  String fields are always populated,
       with the literal text ``'null'`` when the key is absent:

    >>> r = DbResponse.from_json({'_id': 'foo', '_rev': '1-abc'})
    >>> (r.id, r.rev, r.error)
    ('foo', '1-abc', 'null')
    >>> r.rows is None
    True

    2. The typed results (`WriteResult`, `ViewResult`, etc) only carry the
       fields that make sense for one kind of endpoint, and absent fields are
       simply ``None``:

    >>> r = WriteResult.from_json({'ok': True, 'id': 'foo', 'rev': '1-abc'})
    >>> (r.id, r.rev, r.error)
    ('foo', '1-abc', None)

Either way the decoded object is kept verbatim in ``json``, so fields that
aren't explicitly modeled can still be reached:

    >>> r.json['ok']
    True

"""

import json
from collections import namedtuple


__all__ = (
    'Field',
    'ShapeError',
    'capture_headers',

    'Result',
    'DbResponse',

    'DocumentResult',
    'WriteResult',
    'ViewResult',
    'FindResult',
    'ExplainResult',
    'IndexResult',
    'IndexListResult',
    'ServerInfoResult',
    'UpResult',
    'ClusterInfoResult',
    'DatabaseInfoResult',
    'ChangesResult',
    'SecurityResult',
    'PurgeResult',
    'MissingRevsResult',
    'ReplicateResult',
    'ReplicationJobsResult',
    'ReplicationDocResult',
    'StatsResult',
    'SystemResult',
    'UuidsResult',
    'ListResult',
    'ViewInfoResult',
)


Field = namedtuple('Field', 'name keys kind')

# kind => accepted JSON types; 'str' and 'any' are handled separately
KINDS = {
    'str': None,
    'any': None,
    'text': (str,),
    'int': (int,),
    'seq': (int, str),
    'bool': (bool,),
    'list': (list,),
    'dict': (dict,),
}


class ShapeError(ValueError):
    """
    Raised when a decoded value doesn't have the JSON type a field expects.
    """

    def __init__(self, name, key, kind, value):
        self.name = name
        self.key = key
        self.kind = kind
        self.value = value
        super().__init__(
            '{!r} (from key {!r}) must be {}; got {!r}'.format(
                name, key, kind, value
            )
        )


def F(name, *keys, kind='str'):
    """
    Shorthand for declaring a `Field`.

    When no *keys* are given, the attribute name is also the JSON key:

    >>> F('total_rows', kind='int')
    Field(name='total_rows', keys=('total_rows',), kind='int')
    >>> F('id', 'id', '_id')
    Field(name='id', keys=('id', '_id'), kind='str')

    """
    assert kind in KINDS, kind
    return Field(name, (keys if keys else (name,)), kind)


def _lookup(obj, keys):
    """
    Return ``(key, value)`` for the first of *keys* present in *obj*.

    Keys are tried left to right; the first alternative present wins.
    ``(None, None)`` is returned when none of them are present:

    >>> _lookup({'id': 'a', '_id': 'b'}, ('id', '_id'))
    ('id', 'a')
    >>> _lookup({'_id': 'b'}, ('id', '_id'))
    ('_id', 'b')
    >>> _lookup({}, ('id', '_id'))
    (None, None)

    """
    for key in keys:
        if key in obj:
            return (key, obj[key])
    return (None, None)


def _as_text(value):
    """
    Coerce *value* into text the way a string field always gets populated.

    >>> _as_text(None)
    'null'
    >>> _as_text('null')
    'null'
    >>> _as_text(True)
    'true'
    >>> _as_text(17)
    '17'
    >>> _as_text([1, 'two'])
    '[1,"two"]'

    """
    if value is None:
        return 'null'
    if isinstance(value, str):
        return value
    return json.dumps(value,
        ensure_ascii=False,
        sort_keys=True,
        separators=(',',':'),
    )


def _check(field, key, value):
    if field.kind == 'any' or value is None:
        return value
    types = KINDS[field.kind]
    # bool is an int subclass, but a JSON true is never a count:
    if isinstance(value, bool) and field.kind != 'bool':
        raise ShapeError(field.name, key, field.kind, value)
    if not isinstance(value, types):
        raise ShapeError(field.name, key, field.kind, value)
    return value


def capture_headers(pairs):
    """
    Build the captured headers mapping from ``(name, value)`` pairs.

    Names are lower-cased and every value is kept, in the order received:

    >>> capture_headers([('Set-Cookie', 'a=1'), ('ETag', '"1-x"'), ('set-cookie', 'b=2')])
    {'set-cookie': ['a=1', 'b=2'], 'etag': ['"1-x"']}

    """
    headers = {}
    for (name, value) in pairs:
        headers.setdefault(name.lower(), []).append(value)
    return headers


COMMON = (
    F('ok', kind='bool'),
    F('error', kind='text'),
    F('reason', kind='text'),
)


class Result:
    """
    Base class for all normalized responses.

    Subclasses declare their ``fields`` as a tuple of `Field` and are built
    with `Result.from_json()`.  Every result also has:

        * ``json`` - the decoded ``dict``, verbatim

        * ``headers`` - ``dict`` mapping lower-cased header name to a ``list``
          of values
    """

    fields = COMMON

    def __init__(self, json=None, headers=None, **values):
        names = self.field_names()
        unknown = set(values) - set(names)
        if unknown:
            raise TypeError(
                '{}() got unknown fields {!r}'.format(
                    self.__class__.__name__, sorted(unknown)
                )
            )
        self.json = ({} if json is None else json)
        self.headers = ({} if headers is None else headers)
        for name in names:
            setattr(self, name, values.get(name))

    def __repr__(self):
        return '{}({!r})'.format(self.__class__.__name__, self.json)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return (
            self.asdict() == other.asdict()
            and self.json == other.json
            and self.headers == other.headers
        )

    @classmethod
    def field_names(cls):
        return tuple(f.name for f in cls.fields)

    @classmethod
    def convert(cls, field, obj):
        (key, value) = _lookup(obj, field.keys)
        if field.kind == 'str':
            field = field._replace(kind='text')
        return _check(field, key, value)

    @classmethod
    def from_json(cls, obj, headers=None):
        """
        Build a result from the decoded JSON ``dict`` *obj*.

        `ShapeError` is raised if *obj* isn't a ``dict``, or if a field value
        isn't of the expected JSON type.
        """
        if not isinstance(obj, dict):
            raise ShapeError('json', None, 'dict', obj)
        values = dict(
            (f.name, cls.convert(f, obj)) for f in cls.fields
        )
        return cls(obj, headers, **values)

    def asdict(self):
        return dict(
            (name, getattr(self, name)) for name in self.field_names()
        )


STATS_SECTIONS = (
    'couchdb',
    'couch_log',
    'couch_replicator',
    'ddoc_cache',
    'fabric',
    'global_changes',
    'mem3',
    'pread',
    'rexi',
)


class DbResponse(Result):
    """
    A single record covering every response shape CouchDB can return.

    Only the fields relevant to the endpoint called will be populated, but
    there is nothing on the record itself that says which endpoint that was;
    callers must know what they asked for.

    String fields are always populated.  When the key is absent (or its value
    is JSON ``null``), the field is the literal text ``'null'``:

    >>> r = DbResponse.from_json({'ok': True})
    >>> (r.ok, r.id, r.reason)
    (True, 'null', 'null')

    All other fields are only set when their key is present:

    >>> r.total_rows is None
    True

    """

    fields = (
        F('ok', kind='bool'),
        F('error'),
        F('reason'),
        F('id', 'id', '_id'),
        F('rev', 'rev', '_rev'),

        # Views, _all_docs, _find
        F('offset', kind='int'),
        F('rows', kind='list'),
        F('total_rows', kind='int'),
        F('results', kind='list'),
        F('docs', kind='list'),
        F('bookmark'),
        F('execution_stats', kind='dict'),
        F('warning'),

        # Mango indexes, _explain
        F('result'),
        F('name'),
        F('indexes', kind='list'),
        F('db_name', 'dbname'),
        F('fields', kind='any'),
        F('index', kind='dict'),
        F('limit', kind='int'),
        F('opts', kind='dict'),
        F('range', kind='dict'),
        F('selector', kind='dict'),
        F('skip', kind='int'),

        # Changes feed
        F('last_seq'),
        F('pending', kind='int'),

        # Database level
        F('instance_start_time'),
        F('admins', kind='dict'),
        F('members', kind='dict'),
        F('purge_seq', kind='seq'),
        F('purged', kind='dict'),
        F('missed_revs', kind='dict'),

        # Document special fields
        F('deleted', '_deleted', kind='bool'),
        F('attachments', '_attachments', kind='any'),
        F('conflicts', '_conflicts', kind='list'),
        F('deleted_conflicts', '_deleted_conflicts', kind='list'),
        F('local_seq', '_local_seq'),
        F('revs_info', '_revs_info', kind='list'),
        F('revisions', '_revisions', kind='dict'),

        # Server, cluster
        F('couchdb', kind='any'),
        F('uuid'),
        F('vendor', kind='dict'),
        F('version'),
        F('state'),
        F('all_nodes', kind='list'),
        F('cluster_nodes', kind='list'),

        # Replication
        F('history', kind='list'),
        F('replication_id_version', kind='int'),
        F('session_id'),
        F('source_last_seq'),
        F('database'),
        F('doc_id'),
        F('node'),
        F('pid'),
        F('source'),
        F('target'),
        F('start_time'),
        F('jobs', kind='list'),
        F('last_update'),
        F('info', kind='any'),
        F('error_count', kind='int'),

        # /_node/{node}/_stats
        F('fabric', kind='dict'),
        F('ddoc_cache', kind='dict'),
        F('pread', kind='dict'),
        F('couch_replicator', kind='dict'),
        F('mem3', kind='dict'),
        F('couch_log', kind='dict'),
        F('rexi', kind='dict'),
        F('global_changes', kind='dict'),
        F('value', kind='any'),
        F('type'),
        F('desc'),

        # /_node/{node}/_system
        F('uptime', kind='int'),
        F('memory', kind='dict'),
        F('run_queue', kind='int'),
        F('ets_table_count', kind='int'),
        F('context_switches', kind='int'),
        F('reductions', kind='int'),
        F('garbage_collection_count', kind='int'),
        F('words_reclaimed', kind='int'),
        F('io_input', kind='int'),
        F('io_output', kind='int'),
        F('os_proc_count', kind='int'),
        F('stale_proc_count', kind='int'),
        F('process_count', kind='int'),
        F('process_limit', kind='int'),
        F('message_queues', kind='dict'),
        F('internal_replication_jobs', kind='int'),
        F('distribution', kind='dict'),

        # Misc
        F('status', kind='text'),
        F('uuids', kind='list'),
        F('update_seq', kind='seq'),
        F('raw'),
        F('view_index', kind='dict'),
    )

    @classmethod
    def convert(cls, field, obj):
        (key, value) = _lookup(obj, field.keys)
        if field.kind == 'str':
            return _as_text(value)
        return _check(field, key, value)


class DocumentResult(Result):
    """
    A document, as returned by a GET.

    Only the ``_``-prefixed special fields are read.  Everything else in the
    body belongs to the document, so a top-level ``id``, ``ok`` or ``error``
    is just user data, reachable through ``doc``:

    >>> r = DocumentResult.from_json({'_id': 'foo', 'id': 42, 'ok': 'yes'})
    >>> (r.id, r.rev, r.doc['id'])
    ('foo', None, 42)

    """

    fields = (
        F('id', '_id', kind='text'),
        F('rev', '_rev', kind='text'),
        F('deleted', '_deleted', kind='bool'),
        F('attachments', '_attachments', kind='dict'),
        F('conflicts', '_conflicts', kind='list'),
        F('deleted_conflicts', '_deleted_conflicts', kind='list'),
        F('local_seq', '_local_seq', kind='seq'),
        F('revs_info', '_revs_info', kind='list'),
        F('revisions', '_revisions', kind='dict'),
    )

    @property
    def doc(self):
        return self.json


class WriteResult(Result):
    """
    Outcome of writing a document: ``{"ok": true, "id": ..., "rev": ...}``.
    """

    fields = COMMON + (
        F('id', kind='text'),
        F('rev', kind='text'),
    )


class ViewResult(Result):
    fields = COMMON + (
        F('rows', kind='list'),
        F('total_rows', kind='int'),
        F('offset', kind='int'),
        F('update_seq', kind='seq'),
    )


class FindResult(Result):
    fields = COMMON + (
        F('docs', kind='list'),
        F('bookmark', kind='text'),
        F('warning', kind='text'),
        F('execution_stats', kind='dict'),
    )


class ExplainResult(Result):
    fields = COMMON + (
        F('db_name', 'dbname', kind='text'),
        F('index', kind='dict'),
        F('selector', kind='dict'),
        F('opts', kind='dict'),
        F('limit', kind='int'),
        F('skip', kind='int'),
        F('fields', kind='any'),
        F('range', kind='dict'),
    )


class IndexResult(Result):
    """
    Outcome of creating a Mango index; ``result`` is "created" or "exists".
    """

    fields = COMMON + (
        F('result', kind='text'),
        F('id', kind='text'),
        F('name', kind='text'),
    )


class IndexListResult(Result):
    fields = COMMON + (
        F('total_rows', kind='int'),
        F('indexes', kind='list'),
    )


class ServerInfoResult(Result):
    fields = COMMON + (
        F('couchdb', kind='text'),
        F('uuid', kind='text'),
        F('vendor', kind='dict'),
        F('version', kind='text'),
    )


class UpResult(Result):
    fields = COMMON + (
        F('status', kind='text'),
    )


class ClusterInfoResult(Result):
    """
    Answer from ``/_membership`` or ``/_cluster_setup``.
    """

    fields = COMMON + (
        F('all_nodes', kind='list'),
        F('cluster_nodes', kind='list'),
        F('state', kind='text'),
    )


class DatabaseInfoResult(Result):
    fields = COMMON + (
        F('db_name', kind='text'),
        F('update_seq', kind='seq'),
        F('purge_seq', kind='seq'),
        F('instance_start_time', kind='text'),
        F('doc_count', kind='int'),
        F('doc_del_count', kind='int'),
        F('sizes', kind='dict'),
        F('compact_running', kind='bool'),
    )


class ChangesResult(Result):
    fields = COMMON + (
        F('results', kind='list'),
        F('last_seq', kind='seq'),
        F('pending', kind='int'),
    )


class SecurityResult(Result):
    fields = COMMON + (
        F('admins', kind='dict'),
        F('members', kind='dict'),
    )


class PurgeResult(Result):
    fields = COMMON + (
        F('purge_seq', kind='seq'),
        F('purged', kind='dict'),
    )


class MissingRevsResult(Result):
    fields = COMMON + (
        F('missed_revs', kind='dict'),
    )


class ReplicateResult(Result):
    fields = COMMON + (
        F('history', kind='list'),
        F('replication_id_version', kind='int'),
        F('session_id', kind='text'),
        F('source_last_seq', kind='seq'),
    )


class ReplicationJobsResult(Result):
    fields = COMMON + (
        F('jobs', kind='list'),
        F('total_rows', kind='int'),
        F('offset', kind='int'),
    )


class ReplicationDocResult(Result):
    fields = COMMON + (
        F('database', kind='text'),
        F('doc_id', kind='text'),
        F('id', kind='text'),
        F('node', kind='text'),
        F('pid', kind='text'),
        F('source', kind='text'),
        F('target', kind='text'),
        F('state', kind='text'),
        F('info', kind='any'),
        F('error_count', kind='int'),
        F('start_time', kind='text'),
        F('last_update', kind='text'),
    )


class StatsResult(Result):
    """
    Answer from ``/_node/{node}/_stats``.

    The full statistics are grouped by subsystem (``couchdb``, ``fabric``,
    ``mem3``, ...), whereas a single statistic has ``value``, ``type`` and
    ``desc``.
    """

    fields = COMMON + (
        F('value', kind='any'),
        F('type', kind='text'),
        F('desc', kind='text'),
    ) + tuple(F(name, kind='dict') for name in STATS_SECTIONS)


class SystemResult(Result):
    fields = COMMON + (
        F('uptime', kind='int'),
        F('memory', kind='dict'),
        F('run_queue', kind='int'),
        F('ets_table_count', kind='int'),
        F('context_switches', kind='int'),
        F('reductions', kind='int'),
        F('garbage_collection_count', kind='int'),
        F('words_reclaimed', kind='int'),
        F('io_input', kind='int'),
        F('io_output', kind='int'),
        F('os_proc_count', kind='int'),
        F('stale_proc_count', kind='int'),
        F('process_count', kind='int'),
        F('process_limit', kind='int'),
        F('message_queues', kind='dict'),
        F('internal_replication_jobs', kind='int'),
        F('distribution', kind='dict'),
    )


class UuidsResult(Result):
    fields = COMMON + (
        F('uuids', kind='list'),
    )


class ListResult(Result):
    """
    A bare JSON array, as wrapped by the dispatcher under ``results``.
    """

    fields = COMMON + (
        F('results', kind='list'),
    )


class ViewInfoResult(Result):
    fields = COMMON + (
        F('name', kind='text'),
        F('view_index', kind='dict'),
    )
