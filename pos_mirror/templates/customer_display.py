# -----------------------------------------------------------------------------
# CUSTOMER DISPLAY
# - Idle (welcome) / cart / QR views
# - QR view auto-clears after the configured timeout
# - Reconnects on a fixed delay, re-registers, waits for the next snapshot
# -----------------------------------------------------------------------------
CUSTOMER_DISPLAY_HTML = r"""
<!doctype html>
<html>
<head>
  <meta charset="utf-8"/>
  <title>Customer Display</title>
  <meta name="viewport" content="width=device-width, initial-scale=1"/>

  <style>
    *{box-sizing:border-box}
    body{ margin:0; font-family: Arial, sans-serif; background:linear-gradient(135deg,#f0fdf4,#eff6ff); color:#1f2937; min-height:100vh; }
    header{ background:#fff; border-bottom:4px solid #22c55e; padding:18px 24px; display:flex; justify-content:space-between; }
    header h1{ margin:0; font-size:24px; }
    main{ max-width:900px; margin:24px auto; padding:0 16px; }
    .view{ display:none; } .view.on{ display:block; }
    .welcome{ text-align:center; padding:80px 0; font-size:28px; color:#4b5563; }
    table{ width:100%; border-collapse:collapse; background:#fff; border-radius:16px; overflow:hidden; }
    td, th{ padding:12px 14px; border-bottom:1px solid #e5e7eb; text-align:left; }
    .num{ text-align:right; }
    .totals{ margin-top:14px; background:#fff; border-radius:16px; padding:14px; }
    .totals div{ display:flex; justify-content:space-between; padding:4px 0; }
    .grand{ font-size:24px; font-weight:700; color:#16a34a; }
    .qr{ background:#fff; border-radius:24px; padding:24px; text-align:center; }
    .qr img{ width:240px; height:240px; object-fit:contain; border:4px solid #bbf7d0; border-radius:16px; padding:8px; }
  </style>
</head>
<body>
  <header>
    <div><h1 id="storeName">Welcome</h1><div id="storeAddress"></div></div>
    <div id="clock"></div>
  </header>

  <main>
    <div id="idle" class="view on"><div class="welcome">Welcome! Your items will appear here.</div></div>

    <div id="cartView" class="view">
      <table>
        <thead><tr><th>Item</th><th class="num">Price</th><th class="num">Qty</th><th class="num">Total</th></tr></thead>
        <tbody id="lines"></tbody>
      </table>
      <div class="totals">
        <div><span>Subtotal</span><span id="subtotal">0.00</span></div>
        <div><span>Tax</span><span id="tax">0.00</span></div>
        <div class="grand"><span>Total</span><span id="total">0.00</span></div>
      </div>
    </div>

    <div id="qrView" class="view">
      <div class="qr">
        <h2>Scan to pay</h2>
        <p id="qrAmount" class="grand"></p>
        <img id="qrImg" alt="QR code"/>
        <p id="qrTxn" style="font-size:12px;color:#6b7280"></p>
      </div>
    </div>
  </main>

<script>
const WS_PROTO = location.protocol === "https:" ? "wss" : "ws";
const WS_PATH = "__WS_PATH__";
const RECONNECT_MS = __RECONNECT_MS__;
const QR_TIMEOUT_MS = __QR_TIMEOUT_MS__;
const COMPLETED_CLEAR_MS = __COMPLETED_CLEAR_MS__;

let state = "idle";
let cart = [];
let totals = {subtotal:"0.00", tax:"0.00", total:"0.00"};
let qr = null;
let qrTimer = null;
let clearTimer = null;

function show(next){
  state = next;
  ["idle","cartView","qrView"].forEach(id => document.getElementById(id).classList.remove("on"));
  document.getElementById({idle:"idle", cart:"cartView", qr:"qrView"}[next]).classList.add("on");
  render();
}

function settle(){ show(cart.length ? "cart" : "idle"); }

function clearQr(){
  if (qrTimer) { clearTimeout(qrTimer); qrTimer = null; }
  qr = null;
}

function cancelClear(){
  if (clearTimer) { clearTimeout(clearTimer); clearTimer = null; }
}

function escapeHtml(s){
  return (s ?? "").toString().replace(/[&<>"']/g, m => ({
    "&":"&amp;","<":"&lt;",">":"&gt;",'"':"&quot;","'":"&#39;"
  }[m]));
}

function handle(msg){
  switch (msg.type) {
    case "cart_update":
      if (clearTimer) {
        // an empty cart is the paid order's own clear; leave it to the timer
        if (!(msg.cart || []).length) break;
        cancelClear();
      }
      cart = msg.cart || [];
      totals = {subtotal: msg.subtotal, tax: msg.tax, total: msg.total};
      if (state !== "qr") settle();
      else if (msg.restoreCartDisplay) { clearQr(); settle(); }
      break;
    case "qr_payment":
      if (clearTimer) { cancelClear(); cart = []; }
      clearQr();
      qr = msg;
      qrTimer = setTimeout(() => { clearQr(); show("idle"); }, QR_TIMEOUT_MS);
      show("qr");
      break;
    case "qr_payment_cancelled":
    case "popup_close":
    case "payment_success":
      if (qr && msg.transactionUuid && msg.transactionUuid !== qr.transactionUuid) break;
      if (msg.type !== "qr_payment_cancelled" && !qr) break;
      clearQr(); settle();
      break;
    case "restore_cart_display":
      clearQr(); settle();
      break;
    case "order_created":
      if (msg.clearCart) { cart = []; if (state !== "qr") settle(); }
      break;
    case "payment_completed":
      cancelClear();
      clearTimer = setTimeout(() => { clearTimer = null; cart = []; clearQr(); show("idle"); }, COMPLETED_CLEAR_MS);
      break;
    case "store_info":
      if (msg.storeInfo) {
        document.getElementById("storeName").textContent = msg.storeInfo.name || "Welcome";
        document.getElementById("storeAddress").textContent = msg.storeInfo.address || "";
      }
      break;
  }
}

function render(){
  const tbody = document.getElementById("lines");
  tbody.innerHTML = "";
  cart.forEach(it => {
    const tr = document.createElement("tr");
    tr.innerHTML = `<td>${escapeHtml(it.name)}</td><td class="num">${escapeHtml(it.price)}</td>`
      + `<td class="num">${escapeHtml(it.quantity)}</td><td class="num">${escapeHtml(it.total)}</td>`;
    tbody.appendChild(tr);
  });
  document.getElementById("subtotal").textContent = totals.subtotal;
  document.getElementById("tax").textContent = totals.tax;
  document.getElementById("total").textContent = totals.total;
  if (qr) {
    document.getElementById("qrImg").src = qr.qrCodeUrl;
    document.getElementById("qrAmount").textContent = qr.amount;
    document.getElementById("qrTxn").textContent = qr.transactionUuid || "";
  }
}

function connect(){
  const ws = new WebSocket(`${WS_PROTO}://${location.host}${WS_PATH}`);
  ws.onopen = () => ws.send(JSON.stringify({type:"customer_display_connected", timestamp:new Date().toISOString()}));
  ws.onmessage = (ev) => {
    try { handle(JSON.parse(ev.data)); } catch(e){ console.warn("bad message", e); }
  };
  ws.onclose = () => {
    // nothing survives a reconnect; fall back to the welcome screen
    cart = []; clearQr(); cancelClear(); show("idle");
    setTimeout(connect, RECONNECT_MS);
  };
}

setInterval(() => { document.getElementById("clock").textContent = new Date().toLocaleTimeString(); }, 1000);
connect();
</script>
</body>
</html>
"""
