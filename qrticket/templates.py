from fastapi.responses import HTMLResponse
from jinja2 import Environment, DictLoader, select_autoescape

TEMPLATES = {
    "base.html": r"""
    <html>
      <head>
        <meta charset='utf-8'/>
        <title>{% block title %}Tickets{% endblock %}</title>
        <style>
          body { font-family: system-ui; margin: 2rem; }
          .ticket-display, .main-content { max-width: 32rem; margin: 0 auto; }
          form input { display:block; margin-bottom:.5rem; padding:.4rem; width:100%; }
          .meta { color:#666; }
        </style>
      </head>
      <body>
        {% block body %}{% endblock %}
      </body>
    </html>
    """,

    "home.html": r"""
    {% extends "base.html" %}
    {% block title %}Welcome{% endblock %}
    {% block body %}
    <div class="main-content">
      {% if count is not none %}
        <h1>Tickets issued for this vatin: {{ count }} / {{ cap }}</h1>
      {% endif %}
      <p>Create a new ticket:</p>
      <form action="/generate-ticket" method="post">
        <input type="text" name="vatin" placeholder="Vatin" required>
        <input type="text" name="firstName" placeholder="First name" required>
        <input type="text" name="lastName" placeholder="Last name" required>
        <button type="submit">Generate</button>
      </form>
    </div>
    {% endblock %}
    """,

    "ticket.html": r"""
    {% extends "base.html" %}
    {% block title %}Your ticket{% endblock %}
    {% block body %}
    <div class="ticket-display">
      <h1>Your ticket is ready</h1>
      <p>First name: {{ t.first_name }}</p>
      <p>Last name: {{ t.last_name }}</p>
      <p>Vatin: {{ t.vatin }}</p>
      <p>Created at: {{ t.created_at }}</p>
      <img src="{{ t.qr_data_uri }}" alt="QR code">
      <p class="meta">Scan to open <code>{{ t.verification_url }}</code></p>
      <a href="/">Back to home</a>
    </div>
    {% endblock %}
    """,

    "scanned.html": r"""
    {% extends "base.html" %}
    {% block title %}Ticket details{% endblock %}
    {% block body %}
    <div class="ticket-display">
      <h1>Valid ticket</h1>
      <p>Ticket id: {{ t.id }}</p>
      <p>Created at: {{ t.created_at }}</p>
      <a href="/">Back to home</a>
    </div>
    {% endblock %}
    """,

    "not_found.html": r"""
    {% extends "base.html" %}
    {% block title %}Not found{% endblock %}
    {% block body %}
    <div class="ticket-display">
      <h1>Ticket not found.</h1>
      <a href="/">Back to home</a>
    </div>
    {% endblock %}
    """,
}

env = Environment(loader=DictLoader(TEMPLATES), autoescape=select_autoescape(["html"]))

def render_template(name: str, status_code: int = 200, **ctx) -> HTMLResponse:
    tpl = env.get_template(name)
    return HTMLResponse(tpl.render(**ctx), status_code=status_code)
