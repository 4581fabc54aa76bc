"""
GraphiQL page served to browsers
"""

_GRAPHIQL_TEMPLATE = """<!DOCTYPE html>
<html>
    <head>
        <title>{title}</title>
        <link rel="stylesheet" href="https://cdnjs.cloudflare.com/ajax/libs/graphiql/0.10.2/graphiql.css" />
        <script src="https://cdnjs.cloudflare.com/ajax/libs/fetch/1.1.0/fetch.min.js"></script>
        <script src="https://cdnjs.cloudflare.com/ajax/libs/react/15.5.4/react.min.js"></script>
        <script src="https://cdnjs.cloudflare.com/ajax/libs/react/15.5.4/react-dom.min.js"></script>
        <script src="https://cdnjs.cloudflare.com/ajax/libs/graphiql/0.10.2/graphiql.js"></script>
    </head>
    <body style="width: 100%; height: 100%; margin: 0; overflow: hidden;">
        <div id="graphiql" style="height: 100vh;">Loading...</div>
        <script>
            function graphQLFetcher(graphQLParams) {{
                return fetch("{endpoint}", {{
                    method: "post",
                    headers: {{"Content-Type": "application/json"}},
                    body: JSON.stringify(graphQLParams),
                    credentials: "include",
                }}).then(function (response) {{
                    return response.text();
                }}).then(function (responseBody) {{
                    try {{
                        return JSON.parse(responseBody);
                    }} catch (error) {{
                        return responseBody;
                    }}
                }});
            }}
            ReactDOM.render(
                React.createElement(GraphiQL, {{fetcher: graphQLFetcher}}),
                document.getElementById("graphiql")
            );
        </script>
    </body>
</html>
"""


def render_graphiql(endpoint: str, title: str = "GraphiQL") -> str:
    """Render the GraphiQL page wired to ``endpoint``."""
    return _GRAPHIQL_TEMPLATE.format(endpoint=endpoint, title=title)
