"""
SQL Query Node
Runs one statement against a SQLite database
"""
import asyncio
import sqlite3
from typing import Dict, Any, List, Union

from ..node_base import BaseNode, ExecutionContext
from ....utils.json_path import parse_json_value


def run_query(database: str, query: str, params: Union[List[Any], Dict[str, Any]]) -> Dict[str, Any]:
    """
    Execute a statement and return rows (SELECT) or the affected row count

    Each call opens its own connection so it can run in a worker thread.
    """
    conn = sqlite3.connect(database)
    conn.row_factory = sqlite3.Row
    try:
        cursor = conn.execute(query, params)
        if cursor.description is not None:
            rows = [dict(row) for row in cursor.fetchall()]
            return {'result': rows, 'rowCount': len(rows)}
        conn.commit()
        return {'result': [], 'rowCount': cursor.rowcount}
    finally:
        conn.close()


class SqlQueryNode(BaseNode):
    """
    SQL engine step backed by sqlite3

    Inputs:
        query: Overrides the authored state['query']
        params: Bind parameters, JSON array (positional) or object (named)

    Outputs:
        out: Rows as a list of dicts (state field 'result')
    """

    type_id = "SQL_QUERY"
    name = "SQL Query"
    category = "Utilities"
    description = "Runs a SQL statement against a SQLite database file."

    input_ports = ('query', 'params')
    output_ports = ('out',)
    output_fields = {'out': 'result'}
    default_state = {'database': ':memory:', 'query': 'SELECT 1 AS value', 'isLoading': False}
    sticky_fields = ('database', 'query')
    transient_fields = ('result', 'error', 'rowCount')

    async def execute(self, inputs: Dict[str, Any], context: ExecutionContext) -> Dict[str, Any]:
        query = str(inputs.get('query') or self.state.get('query') or '').strip()
        if not query:
            raise ValueError("SQL query is empty")
        params = parse_json_value(inputs.get('params', []), "SQL parameters")
        if not isinstance(params, (list, dict)):
            params = [params]
        database = str(self.state.get('database') or ':memory:')
        try:
            return await asyncio.to_thread(run_query, database, query, params)
        except sqlite3.Error as e:
            raise ValueError(f"SQL error: {e}") from e
