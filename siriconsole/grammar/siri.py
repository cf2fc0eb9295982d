# Copyright (c) 2025 Kenneth Stott
#
# This source code is licensed under the Business Source License 1.1
# found in the LICENSE file in the root directory of this source tree.
#
# NOTICE: Use of this software for training artificial intelligence or
# machine learning models is strictly prohibited without explicit written
# permission from the copyright holder.

"""SiriDB query grammar (pyleri) and its GrammarParser adapter.

The grammar covers the statements the console can complete; it is used to
find the parse position of a partial command and the keywords that may follow.
It does not validate commands before they are sent.
"""

import logging
import re

from pyleri import (
    Choice,
    Grammar,
    Keyword,
    List,
    Optional,
    Regex,
    Repeat,
    Sequence,
    Token as PyleriToken,
    Tokens,
)

from siriconsole.errors import GrammarError
from siriconsole.grammar.base import ParseResult, Token

logger = logging.getLogger(__name__)


class SiriGrammar(Grammar):
    RE_KEYWORDS = re.compile(r'^[a-z_]+')

    r_float = Regex(r'[-+]?[0-9]*\.?[0-9]+')
    r_integer = Regex(r'[-+]?[0-9]+')
    r_uinteger = Regex(r'[0-9]+')
    r_time_str = Regex(r'[0-9]+[smhdw]')
    r_singleq_str = Regex(r"(?:'(?:[^']*)')+")
    r_doubleq_str = Regex(r'(?:"(?:[^"]*)")+')
    r_grave_str = Regex(r'(?:`(?:[^`]*)`)+')
    r_uuid_str = Regex(r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}')
    r_regex = Regex(r'(/[^/\\]*(?:\\.[^/\\]*)*/i?)')
    r_comment = Regex(r'#.*')

    # import is a console command, completed by the import provider
    r_import = Regex(r'import(?=\s|$)')
    r_import_path = Regex(r'\S*/')

    k_access = Keyword('access')
    k_active_handles = Keyword('active_handles')
    k_address = Keyword('address')
    k_after = Keyword('after')
    k_alter = Keyword('alter')
    k_and = Keyword('and')
    k_as = Keyword('as')
    k_before = Keyword('before')
    k_between = Keyword('between')
    k_buffer_path = Keyword('buffer_path')
    k_buffer_size = Keyword('buffer_size')
    k_count = Keyword('count')
    k_create = Keyword('create')
    k_critical = Keyword('critical')
    k_database = Keyword('database')
    k_dbname = Keyword('dbname')
    k_debug = Keyword('debug')
    k_derivative = Keyword('derivative')
    k_difference = Keyword('difference')
    k_drop = Keyword('drop')
    k_drop_threshold = Keyword('drop_threshold')
    k_duration_log = Keyword('duration_log')
    k_duration_num = Keyword('duration_num')
    k_end = Keyword('end')
    k_error = Keyword('error')
    k_expiration_log = Keyword('expiration_log')
    k_expiration_num = Keyword('expiration_num')
    k_expression = Keyword('expression')
    k_first = Keyword('first')
    k_for = Keyword('for')
    k_from = Keyword('from')
    k_full = Keyword('full')
    k_grant = Keyword('grant')
    k_group = Keyword('group')
    k_groups = Keyword('groups')
    k_help = Keyword('help')
    k_info = Keyword('info')
    k_insert = Keyword('insert')
    k_last = Keyword('last')
    k_length = Keyword('length')
    k_limit = Keyword('limit')
    k_list = Keyword('list')
    k_list_limit = Keyword('list_limit')
    k_log_level = Keyword('log_level')
    k_max = Keyword('max')
    k_mean = Keyword('mean')
    k_median = Keyword('median')
    k_mem_usage = Keyword('mem_usage')
    k_merge = Keyword('merge')
    k_min = Keyword('min')
    k_modify = Keyword('modify')
    k_name = Keyword('name')
    k_now = Keyword('now')
    k_online = Keyword('online')
    k_open_files = Keyword('open_files')
    k_or = Keyword('or')
    k_password = Keyword('password')
    k_pool = Keyword('pool')
    k_pools = Keyword('pools')
    k_port = Keyword('port')
    k_read = Keyword('read')
    k_received_points = Keyword('received_points')
    k_revoke = Keyword('revoke')
    k_select = Keyword('select')
    k_select_points_limit = Keyword('select_points_limit')
    k_series = Keyword('series')
    k_server = Keyword('server')
    k_servers = Keyword('servers')
    k_set = Keyword('set')
    k_shards = Keyword('shards')
    k_show = Keyword('show')
    k_size = Keyword('size')
    k_start = Keyword('start')
    k_startup_time = Keyword('startup_time')
    k_status = Keyword('status')
    k_stddev = Keyword('stddev')
    k_sum = Keyword('sum')
    k_tags = Keyword('tags')
    k_time_precision = Keyword('time_precision')
    k_timeit = Keyword('timeit')
    k_timezone = Keyword('timezone')
    k_to = Keyword('to')
    k_type = Keyword('type')
    k_uptime = Keyword('uptime')
    k_user = Keyword('user')
    k_users = Keyword('users')
    k_using = Keyword('using')
    k_uuid = Keyword('uuid')
    k_variance = Keyword('variance')
    k_version = Keyword('version')
    k_warning = Keyword('warning')
    k_where = Keyword('where')
    k_who_am_i = Keyword('who_am_i')
    k_write = Keyword('write')

    string = Choice(r_singleq_str, r_doubleq_str)

    time_expr = List(
        Choice(k_now, r_time_str, r_integer, string),
        delimiter=Tokens('+ -'),
        mi=1)

    series_match = List(
        Choice(string, r_regex, r_grave_str),
        delimiter=Tokens('| & ^ -'),
        mi=1)

    aggregate_function = Sequence(
        Choice(
            k_mean, k_median, k_sum, k_min, k_max, k_count, k_first,
            k_last, k_difference, k_derivative, k_stddev, k_variance),
        '(', Optional(time_expr), ')')

    aggregate_functions = List(aggregate_function, delimiter='=>', mi=1)

    select_aggregate = Choice(PyleriToken('*'), aggregate_functions)

    after_expr = Sequence(k_after, time_expr)
    before_expr = Sequence(k_before, time_expr)
    between_expr = Sequence(k_between, time_expr, k_and, time_expr)

    merge_as = Sequence(
        k_merge, k_as, string,
        Optional(Sequence(k_using, aggregate_functions)))

    select_stmt = Sequence(
        k_select,
        List(select_aggregate, mi=1),
        k_from,
        series_match,
        Optional(Choice(after_expr, before_expr, between_expr)),
        Optional(merge_as))

    prop = Choice(
        k_name, k_length, k_type, k_start, k_end, k_pool, k_status,
        k_address, k_port, k_version, k_online, k_access, k_series,
        k_size, k_server, k_expression, k_uuid, k_log_level,
        most_greedy=False)

    where_expr = Sequence(
        k_where,
        List(
            Sequence(
                prop,
                Tokens('== != <= >= < > ~ !~'),
                Choice(string, r_regex, r_float, r_integer, r_time_str)),
            delimiter=Choice(k_and, k_or),
            mi=1))

    limit_expr = Sequence(k_limit, r_uinteger)

    list_stmt = Sequence(
        k_list,
        Choice(k_series, k_tags, k_users, k_groups, k_shards, k_pools, k_servers),
        Optional(List(prop, mi=1)),
        Optional(Choice(series_match, r_regex)),
        Optional(where_expr),
        Optional(limit_expr))

    count_stmt = Sequence(
        k_count,
        Choice(k_series, k_tags, k_users, k_groups, k_shards, k_pools, k_servers),
        Optional(series_match),
        Optional(where_expr))

    show_stmt = Sequence(
        k_show,
        List(
            Choice(
                k_active_handles, k_buffer_path, k_buffer_size, k_dbname,
                k_drop_threshold, k_duration_log, k_duration_num,
                k_expiration_log, k_expiration_num, k_list_limit,
                k_log_level, k_mem_usage, k_open_files, k_pool,
                k_received_points, k_select_points_limit, k_server,
                k_startup_time, k_status, k_time_precision, k_timezone,
                k_uptime, k_uuid, k_version, k_who_am_i,
                most_greedy=False),
            mi=0))

    log_level = Choice(k_debug, k_info, k_warning, k_error, k_critical)

    create_stmt = Sequence(
        k_create,
        Choice(
            Sequence(k_user, string, k_set, k_password, string),
            Sequence(k_group, r_grave_str, k_for, r_regex)))

    alter_stmt = Sequence(
        k_alter,
        Choice(
            Sequence(
                k_user, string, k_set,
                Choice(Sequence(k_password, string), Sequence(k_name, string))),
            Sequence(
                k_group, r_grave_str, k_set,
                Choice(Sequence(k_expression, r_regex), Sequence(k_name, string))),
            Sequence(
                k_database, k_set,
                Choice(
                    Sequence(k_drop_threshold, r_float),
                    Sequence(k_list_limit, r_uinteger),
                    Sequence(k_select_points_limit, r_uinteger),
                    Sequence(k_timezone, string),
                    Sequence(k_expiration_num, r_time_str),
                    Sequence(k_expiration_log, r_time_str))),
            Sequence(k_server, Choice(r_uuid_str, string), k_set, k_log_level, log_level),
            Sequence(k_servers, k_set, k_log_level, log_level)))

    drop_stmt = Sequence(
        k_drop,
        Choice(
            Sequence(k_series, Optional(series_match), Optional(where_expr)),
            Sequence(k_shards, Optional(where_expr)),
            Sequence(k_user, string),
            Sequence(k_group, r_grave_str),
            Sequence(k_server, Choice(r_uuid_str, string))))

    access_expr = List(
        Choice(
            k_read, k_write, k_modify, k_full, k_select, k_show, k_list,
            k_count, k_create, k_insert, k_drop, k_grant, k_revoke, k_alter,
            most_greedy=False),
        delimiter=',',
        mi=1)

    grant_stmt = Sequence(k_grant, access_expr, k_to, k_user, string)
    revoke_stmt = Sequence(k_revoke, access_expr, k_from, k_user, string)

    help_stmt = Sequence(
        k_help,
        Repeat(
            Choice(
                k_access, k_alter, k_count, k_create, k_drop, k_grant,
                k_list, k_revoke, k_select, k_show, k_timeit,
                k_user, k_group, k_database, k_series, k_servers,
                most_greedy=False),
            mi=0, ma=2))

    import_stmt = Sequence(r_import, Optional(r_import_path))

    timeit_stmt = Repeat(k_timeit, mi=1, ma=1)

    START = Sequence(
        Optional(timeit_stmt),
        Optional(Choice(
            select_stmt,
            list_stmt,
            count_stmt,
            alter_stmt,
            create_stmt,
            drop_stmt,
            grant_stmt,
            revoke_stmt,
            show_stmt,
            help_stmt,
            import_stmt,
            most_greedy=False)),
        Optional(r_comment))


class SiriGrammarParser:
    """GrammarParser backed by :class:`SiriGrammar`."""

    def __init__(self, grammar: Grammar | None = None):
        self._grammar = grammar or SiriGrammar()

    def parse(self, text: str) -> ParseResult:
        try:
            res = self._grammar.parse(text)
            expecting = sorted(
                (_to_token(elem) for elem in (res.expecting or ())),
                key=lambda t: (not t.is_keyword, t.value),
            )
        except Exception as e:
            raise GrammarError(f"cannot parse {text!r}: {e}") from e

        pos = min(res.pos, len(text))
        # the remainder starts at the first non blank character
        while pos < len(text) and text[pos].isspace():
            pos += 1

        return ParseResult(pos=pos, is_valid=res.is_valid, expecting=expecting)


def _to_token(elem) -> Token:
    # pyleri keeps element values in slots without public accessors
    if isinstance(elem, Keyword):
        return Token(elem._keyword, is_keyword=True)
    if isinstance(elem, PyleriToken):
        return Token(elem._token)
    if isinstance(elem, Tokens):
        return Token(" ".join(elem._tokens))
    return Token(getattr(elem, "name", None) or type(elem).__name__)
