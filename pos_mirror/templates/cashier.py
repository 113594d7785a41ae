# -----------------------------------------------------------------------------
# CASHIER UI
# - Multiple open orders, only the active one is mirrored
# - Every cart mutation pushes a full cart_update snapshot
# - QR payment -> qr_payment, cancel -> qr_payment_cancelled + restoring cart_update
# -----------------------------------------------------------------------------
CASHIER_HTML = r"""
<!doctype html>
<html>
<head>
  <meta charset="utf-8"/>
  <title>Cashier Console</title>
  <meta name="viewport" content="width=device-width, initial-scale=1"/>

  <style>
    :root{
      --bg:#0b1020;
      --card:#111a33;
      --text:#e9ecf5;
      --muted:#a9b3d1;
      --line:rgba(255,255,255,.10);
      --good:#22c55e;
      --bad:#ef4444;
      --accent:#7c3aed;
      --radius:16px;
    }
    *{box-sizing:border-box}
    body{ margin:0; font-family: ui-sans-serif, system-ui, Arial; color:var(--text); background:var(--bg); padding:18px; }
    .topbar{ display:flex; justify-content:space-between; align-items:center; padding:14px 16px; border:1px solid var(--line); border-radius:var(--radius); margin-bottom:14px; }
    .pill{ padding:4px 10px; border-radius:999px; background:rgba(255,255,255,.08); font-size:13px; }
    .pill.good{ color:var(--good); } .pill.bad{ color:var(--bad); }
    .grid{ display:grid; grid-template-columns: 2fr 1fr; gap:14px; }
    .card{ background:var(--card); border:1px solid var(--line); border-radius:var(--radius); padding:14px; }
    .products{ display:grid; grid-template-columns:repeat(auto-fill,minmax(140px,1fr)); gap:10px; }
    button{ background:var(--accent); color:#fff; border:0; border-radius:10px; padding:10px 12px; cursor:pointer; font-weight:600; }
    button.ghost{ background:rgba(255,255,255,.08); }
    .line{ display:flex; justify-content:space-between; align-items:center; padding:6px 0; border-bottom:1px solid var(--line); }
    .totals div{ display:flex; justify-content:space-between; padding:3px 0; color:var(--muted); }
    .totals .grand{ color:var(--text); font-weight:700; font-size:18px; }
    .tabs{ display:flex; gap:6px; margin-bottom:10px; flex-wrap:wrap; }
    .tabs button.active{ background:var(--good); }
  </style>
</head>
<body>
  <div class="topbar">
    <strong>Cashier Console</strong>
    <span id="wsState" class="pill">WS: connecting...</span>
  </div>

  <div class="grid">
    <div class="card">
      <div class="products" id="products"></div>
    </div>
    <div class="card">
      <div class="tabs" id="tabs"></div>
      <div id="lines"></div>
      <div class="totals">
        <div><span>Subtotal</span><span id="subtotal">0.00</span></div>
        <div><span>Tax</span><span id="tax">0.00</span></div>
        <div class="grand"><span>Total</span><span id="total">0.00</span></div>
      </div>
      <p style="margin-top:12px; display:flex; gap:8px; flex-wrap:wrap">
        <button class="ghost" onclick="clearCart()">Clear</button>
        <button onclick="startQr()">QR Payment</button>
        <button class="ghost" onclick="cancelQr()">Cancel QR</button>
        <button class="ghost" onclick="newOrder()">+ Order</button>
      </p>
    </div>
  </div>

<script>
const WS_PROTO = location.protocol === "https:" ? "wss" : "ws";
const WS_PATH = "__WS_PATH__";
const RECONNECT_MS = __RECONNECT_MS__;
const TAX_RATE = __TAX_RATE__;

const PRODUCTS = [
  {id:1, name:"Coffee", price:"2.50"},
  {id:2, name:"Tea", price:"2.00"},
  {id:3, name:"Croissant", price:"3.25"},
  {id:4, name:"Sandwich", price:"6.90"},
];

let ws = null;
let reconnectTimer = null;
let orders = [{id: 1, cart: []}];
let activeId = 1;
let nextOrderId = 2;
let pendingTxn = null;

const cents = (s) => Math.round(parseFloat(s) * 100);
const fmt = (c) => (c / 100).toFixed(2);

function active(){ return orders.find(o => o.id === activeId); }

function send(msg){
  // fire-and-forget
  if (ws && ws.readyState === WebSocket.OPEN) ws.send(JSON.stringify(msg));
}

function connect(){
  ws = new WebSocket(`${WS_PROTO}://${location.host}${WS_PATH}`);
  ws.onopen = () => { setWsState("WS: connected", "good"); pushCart(); };
  ws.onclose = () => {
    setWsState("WS: closed", "bad");
    reconnectTimer = setTimeout(connect, RECONNECT_MS);
  };
  ws.onmessage = (ev) => {
    let msg;
    try { msg = JSON.parse(ev.data); } catch(e){ return; }
    if ((msg.type === "payment_success" || msg.type === "popup_close") && pendingTxn
        && (!msg.transactionUuid || msg.transactionUuid === pendingTxn)) {
      pendingTxn = null;
    }
  };
}

function escapeHtml(s){
  return (s ?? "").toString().replace(/[&<>"']/g, m => ({
    "&":"&amp;","<":"&lt;",">":"&gt;",'"':"&quot;","'":"&#39;"
  }[m]));
}

function setWsState(text, cls){
  const el = document.getElementById("wsState");
  el.textContent = text;
  el.className = "pill " + cls;
}

function snapshot(cart){
  const sub = cart.reduce((s, it) => s + cents(it.total), 0);
  const tax = Math.round(sub * TAX_RATE);
  return {subtotal: fmt(sub), tax: fmt(tax), total: fmt(sub + tax)};
}

function pushCart(restore){
  const cart = active().cart;
  const t = snapshot(cart);
  const msg = {type:"cart_update", cart, ...t, timestamp: new Date().toISOString()};
  if (restore) msg.restoreCartDisplay = true;
  send(msg);
  render();
}

function addItem(p){
  const cart = active().cart;
  const line = cart.find(it => it.id === p.id);
  if (line) setQty(p.id, line.quantity + 1);
  else { cart.push({id:p.id, name:p.name, price:p.price, quantity:1, total:p.price}); pushCart(); }
}

function setQty(id, q){
  const o = active();
  if (q <= 0) o.cart = o.cart.filter(it => it.id !== id);
  else o.cart = o.cart.map(it => it.id === id ? {...it, quantity:q, total: fmt(cents(it.price) * q)} : it);
  pushCart();
}

function clearCart(){ active().cart = []; pushCart(); }

function newOrder(){ orders.push({id: nextOrderId, cart: []}); switchOrder(nextOrderId++); }
function switchOrder(id){ activeId = id; pushCart(); }

function startQr(){
  const cart = active().cart;
  if (!cart.length) return;
  pendingTxn = (crypto.randomUUID ? crypto.randomUUID() : String(Date.now()));
  const t = snapshot(cart);
  send({
    type:"qr_payment",
    qrCodeUrl:`https://api.qrserver.com/v1/create-qr-code/?data=${encodeURIComponent(pendingTxn)}`,
    amount: parseFloat(t.total),
    paymentMethod:"qr_code",
    transactionUuid: pendingTxn,
    timestamp: new Date().toISOString(),
  });
}

function cancelQr(){
  if (!pendingTxn) return;
  send({type:"qr_payment_cancelled", transactionUuid: pendingTxn});
  pushCart(true);
  pendingTxn = null;
}

function render(){
  const tabs = document.getElementById("tabs");
  tabs.innerHTML = "";
  orders.forEach(o => {
    const b = document.createElement("button");
    b.textContent = `Order ${o.id}`;
    b.className = o.id === activeId ? "active" : "ghost";
    b.onclick = () => switchOrder(o.id);
    tabs.appendChild(b);
  });

  const lines = document.getElementById("lines");
  lines.innerHTML = "";
  active().cart.forEach(it => {
    const row = document.createElement("div");
    row.className = "line";
    row.innerHTML = `<span>${escapeHtml(it.name)} x${escapeHtml(it.quantity)}</span><span>${escapeHtml(it.total)}</span>`;
    const minus = document.createElement("button"); minus.className = "ghost"; minus.textContent = "-";
    minus.onclick = () => setQty(it.id, it.quantity - 1);
    const plus = document.createElement("button"); plus.className = "ghost"; plus.textContent = "+";
    plus.onclick = () => setQty(it.id, it.quantity + 1);
    row.append(minus, plus);
    lines.appendChild(row);
  });

  const t = snapshot(active().cart);
  document.getElementById("subtotal").textContent = t.subtotal;
  document.getElementById("tax").textContent = t.tax;
  document.getElementById("total").textContent = t.total;
}

const grid = document.getElementById("products");
PRODUCTS.forEach(p => {
  const b = document.createElement("button");
  b.textContent = `${p.name} ${p.price}`;
  b.onclick = () => addItem(p);
  grid.appendChild(b);
});

render();
connect();
</script>
</body>
</html>
"""
