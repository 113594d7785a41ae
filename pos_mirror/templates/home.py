HOME_HTML = """
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width, initial-scale=1.0"/>
  <title>POS Cart Mirror</title>

  <style>
    *{ box-sizing:border-box; margin:0; padding:0; }
    html, body{ height:100%; font-family: Arial, sans-serif; }

    body{
      background:#0b1220;
      color:rgba(255,255,255,0.96);
      display:flex;
      align-items:center;
      justify-content:center;
    }

    .hero{ text-align:center; padding:32px; }
    .hero h1{ font-size:34px; margin-bottom:10px; }
    .hero p{ color:rgba(255,255,255,0.82); margin-bottom:26px; }

    .btns{ display:flex; gap:14px; justify-content:center; flex-wrap:wrap; }
    .btn{
      display:inline-block;
      padding:14px 22px;
      border-radius:14px;
      text-decoration:none;
      color:#fff;
      font-weight:700;
      box-shadow:0 22px 70px rgba(0,0,0,0.28);
    }
    .btn.cashier{ background:linear-gradient(135deg,#7c3aed,#06b6d4); }
    .btn.display{ background:linear-gradient(135deg,#16a34a,#0ea5e9); }
  </style>
</head>
<body>
  <div class="hero">
    <h1>POS Cart Mirror</h1>
    <p>Open the cashier console on the till and the customer display on the second screen.</p>
    <div class="btns">
      <a class="btn cashier" href="/cashier">Cashier Console</a>
      <a class="btn display" href="/customer-display">Customer Display</a>
    </div>
  </div>
</body>
</html>
"""
